"""HTML rendering for transcript turns.

Assistant text is resolved for citations first: file markers become ``[k]``
tokens and the cited files are listed under the message as download links.
"""

import html
import re
from dataclasses import dataclass, field

from assistant_chat.citations.links import FileLinks
from assistant_chat.citations.resolver import CitationResolver
from assistant_chat.models.schemas import DocumentReference


@dataclass
class RenderedTurn:
    """HTML for one assistant turn plus the documents it cites."""

    html: str
    references: list[DocumentReference] = field(default_factory=list)


_SAFE_URL = re.compile(r"^(?:https?://|/(?!/))", re.IGNORECASE)
_CODE_PLACEHOLDER = re.compile(r"\x00(\d+)\x00")


def _image(match: re.Match[str]) -> str:
    alt, url = match.group(1), match.group(2)
    if not _SAFE_URL.match(html.unescape(url)):
        return alt
    return f'<img src="{url}" alt="{alt}" class="rounded-lg my-2 max-w-full">'


def _link(match: re.Match[str]) -> str:
    label, url = match.group(1), match.group(2)
    if not _SAFE_URL.match(html.unescape(url)):
        return label
    return (
        f'<a href="{url}" class="text-blue-600 underline" target="_blank" '
        f'rel="noopener noreferrer">{label}</a>'
    )


def markdown_to_html(text: str) -> str:
    """Convert markdown to HTML for chat display.

    Supports: bold, italic, inline code, code blocks, images, links, lists,
    and ``[k]`` reference tokens. Links and images only accept http(s) and
    site-relative URLs; code is left untouched by the other rules.
    """
    # Escape HTML entities first, quotes included
    text = html.escape(text.replace("\x00", ""), quote=True)

    code_spans: list[str] = []

    def stash(rendered: str) -> str:
        code_spans.append(rendered)
        return f"\x00{len(code_spans) - 1}\x00"

    # Code blocks (```code```)
    text = re.sub(
        r"```(\w*)\n?([\s\S]*?)```",
        lambda m: stash(
            '<pre class="bg-gray-800 text-gray-100 rounded-lg p-3 my-2 overflow-x-auto text-xs">'
            f"<code>{m.group(2)}</code></pre>"
        ),
        text,
    )

    # Inline code (`code`)
    text = re.sub(
        r"`([^`]+)`",
        lambda m: stash(
            '<code class="bg-gray-200 text-pink-600 px-1.5 py-0.5 rounded text-xs">'
            f"{m.group(1)}</code>"
        ),
        text,
    )

    # Bold (**text** or __text__)
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)

    # Italic (*text* or _text_)
    text = re.sub(r"\*([^*]+)\*", r"<em>\1</em>", text)
    text = re.sub(r"(?<![\w/])_([^_]+)_(?!\w)", r"<em>\1</em>", text)

    # Images ![alt](url)
    text = re.sub(r"!\[([^\]]*)\]\(([^)\s]+)\)", _image, text)

    # Links [text](url)
    text = re.sub(r"\[([^\]]+)\]\(([^)\s]+)\)", _link, text)

    # Reference tokens [k]
    text = re.sub(r"\[(\d+)\]", r'<sup class="doc-ref">[\1]</sup>', text)

    # Unordered lists (- item or * item)
    lines = text.split("\n")
    in_list = False
    result = []
    for line in lines:
        stripped = line.strip()
        if re.match(r"^[-*]\s+", stripped):
            if not in_list:
                result.append('<ul class="list-disc list-inside my-2 space-y-1">')
                in_list = True
            item = re.sub(r"^[-*]\s+", "", stripped)
            result.append(f"<li>{item}</li>")
        else:
            if in_list:
                result.append("</ul>")
                in_list = False
            result.append(line)
    if in_list:
        result.append("</ul>")
    text = "\n".join(result)

    # Ordered lists (1. item)
    lines = text.split("\n")
    in_list = False
    result = []
    for line in lines:
        stripped = line.strip()
        if re.match(r"^\d+\.\s+", stripped):
            if not in_list:
                result.append('<ol class="list-decimal list-inside my-2 space-y-1">')
                in_list = True
            item = re.sub(r"^\d+\.\s+", "", stripped)
            result.append(f"<li>{item}</li>")
        else:
            if in_list:
                result.append("</ol>")
                in_list = False
            result.append(line)
    if in_list:
        result.append("</ol>")
    text = "\n".join(result)

    # Line breaks (preserve newlines as <br>)
    text = text.replace("\n", "<br>")

    return _CODE_PLACEHOLDER.sub(lambda m: code_spans[int(m.group(1))], text)


def code_to_html(text: str) -> str:
    """Render tool input as numbered code lines."""
    lines = [
        f'<div><span class="text-gray-400">{i}. </span>{html.escape(line)}</div>'
        for i, line in enumerate(text.split("\n"), start=1)
    ]
    return "".join(lines)


def references_to_html(references: list[DocumentReference], links: FileLinks) -> str:
    """Render cited documents as numbered download links."""
    items = []
    for ref in references:
        name = html.escape(ref.display_name, quote=True)
        items.append(
            f'<a href="{html.escape(ref.url, quote=True)}" target="_blank" '
            f'rel="noopener noreferrer" title="{name}" class="doc-link">'
            f'<span class="doc-ref">[{ref.reference_order}]</span> 📄 '
            f"{html.escape(links.short_name(ref.display_name))}</a>"
        )
    return "".join(items)


def render_assistant_turn(text: str, resolver: CitationResolver) -> RenderedTurn:
    """Resolve citations in an assistant turn and render it as HTML."""
    resolved = resolver.resolve(text)
    return RenderedTurn(html=markdown_to_html(resolved.text), references=resolved.references)
