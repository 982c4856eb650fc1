"""Citation resolution for assistant turns.

Rewrites file citation markers of the form ``[label](/api/files/<file_id>)``
into positional ``[k]`` tokens and collects the cited files as
DocumentReference entries, one per file id, numbered by first appearance.
"""

import re
from dataclasses import dataclass, field

from assistant_chat.citations.links import FileLinks
from assistant_chat.models.schemas import DocumentReference

# Link label: backslash escapes, plain characters or one level of nested brackets
_LABEL = r"((?:\\.|[^\[\]\\\n]|\[[^\[\]\n]*\])*)"
_LABEL_ESCAPE = re.compile(r"\\([\\\[\]])")
_FILE_ID = r"([^\s()/]+)"


@dataclass
class ResolvedCitations:
    """Outcome of resolving one turn's text.

    Attributes:
        text: Text with every citation marker replaced by its ``[k]`` token.
        references: Cited files ordered by reference number.
    """

    text: str
    references: list[DocumentReference] = field(default_factory=list)


class CitationResolver:
    """Resolves citation markers that point at the local file route."""

    def __init__(self, links: FileLinks) -> None:
        self._links = links
        # Image embeds share the link syntax and are not citations
        self._pattern = re.compile(
            rf"(?<!!)\[{_LABEL}\]\({re.escape(links.file_route)}/{_FILE_ID}\)"
        )

    def resolve(self, text: str) -> ResolvedCitations:
        """Replace citation markers and collect the cited documents.

        The same file cited several times, under any label, keeps the number
        it got at its first citation. Text without complete markers is
        returned unchanged.

        Args:
            text: Assistant turn text.

        Returns:
            ResolvedCitations with rewritten text and ordered references.
        """
        references: dict[str, DocumentReference] = {}

        def replace(match: re.Match[str]) -> str:
            label, file_id = match.group(1), match.group(2)
            reference = references.get(file_id)
            if reference is None:
                reference = DocumentReference(
                    external_file_id=file_id,
                    display_name=(
                        _LABEL_ESCAPE.sub(r"\1", label).strip() or self._links.name_for(file_id)
                    ),
                    reference_order=len(references) + 1,
                    url=self._links.url_for(file_id),
                )
                references[file_id] = reference
            return f"[{reference.reference_order}]"

        resolved = self._pattern.sub(replace, text)
        return ResolvedCitations(text=resolved, references=list(references.values()))
