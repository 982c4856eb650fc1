"""Immutable conversation transcript.

Every operation returns a new Transcript that shares the untouched turns, so a
reader holding a transcript never observes a half-applied update. The last
turn is the open turn: the only one that streaming events may extend.
"""

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from assistant_chat.citations.links import FileLinks
from assistant_chat.models.schemas import Annotation, ConversationTurn, Role

logger = logging.getLogger(__name__)


class Transcript(BaseModel):
    """Ordered, append-only sequence of conversation turns.

    Attributes:
        turns: Turns in arrival order; the last one is open.
    """

    model_config = ConfigDict(frozen=True)

    turns: tuple[ConversationTurn, ...] = ()

    def __len__(self) -> int:
        return len(self.turns)

    def __getitem__(self, index: int) -> ConversationTurn:
        return self.turns[index]

    @property
    def open_turn(self) -> ConversationTurn | None:
        return self.turns[-1] if self.turns else None

    def append_turn(self, role: Role, initial_text: str = "") -> "Transcript":
        """Return a transcript with a new open turn."""
        turn = ConversationTurn(role=role, text=initial_text)
        return Transcript(turns=(*self.turns, turn))

    def append_to_open_turn(self, fragment: str) -> "Transcript":
        """Return a transcript whose open turn ends with ``fragment``.

        An empty transcript is returned unchanged: a fragment without an open
        turn means the service sent events out of order.
        """
        if not self.turns:
            logger.warning("Dropping text fragment: transcript has no open turn")
            return self

        last = self.turns[-1]
        return self._replace_open_turn(last.model_copy(update={"text": last.text + fragment}))

    def annotate_open_turn(
        self,
        annotations: Iterable[Annotation],
        links: FileLinks,
    ) -> "Transcript":
        """Replace annotated source spans in the open turn with file markers.

        Annotations are applied in order, each one replacing every occurrence
        of its span, so later annotations see the text earlier ones produced.
        When several annotations share a span, the last one wins.

        Args:
            annotations: Annotations in the order the stream delivered them.
            links: Formats the file marker that replaces each span.

        Returns:
            Transcript with the annotated open turn.
        """
        if not self.turns:
            logger.warning("Dropping annotations: transcript has no open turn")
            return self

        pending = [a for a in annotations if a.text and a.file_id]
        last_index = {a.text: i for i, a in enumerate(pending)}

        text = self.turns[-1].text
        for i, annotation in enumerate(pending):
            if last_index[annotation.text] != i:
                continue
            text = text.replace(annotation.text, links.marker_for(annotation.file_id))

        if text == self.turns[-1].text:
            return self
        return self._replace_open_turn(self.turns[-1].model_copy(update={"text": text}))

    def _replace_open_turn(self, turn: ConversationTurn) -> "Transcript":
        return Transcript(turns=(*self.turns[:-1], turn))
