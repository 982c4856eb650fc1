"""Unit tests for the immutable transcript reducer."""

import pytest_check as check

from assistant_chat.citations.links import FileLinks
from assistant_chat.models.schemas import Annotation, FileReference, Role
from assistant_chat.transcript.reducer import Transcript


def citation(text: str, file_id: str) -> Annotation:
    return Annotation(type="file_citation", text=text, file_citation=FileReference(file_id=file_id))


class TestAppend:
    """Tests for append_turn and append_to_open_turn."""

    def test_append_turn_returns_new_transcript(self) -> None:
        """Appending leaves the original transcript untouched."""
        empty = Transcript()

        updated = empty.append_turn(Role.USER, "Hello")

        check.equal(len(empty), 0)
        check.equal(len(updated), 1)
        check.equal(updated.open_turn.role, Role.USER)
        check.equal(updated.open_turn.text, "Hello")

    def test_append_to_open_turn_concatenates(self) -> None:
        """Fragments accumulate on the last turn only."""
        transcript = (
            Transcript()
            .append_turn(Role.USER, "Question")
            .append_turn(Role.ASSISTANT)
            .append_to_open_turn("Smoke ")
            .append_to_open_turn("disrupts sleep.")
        )

        check.equal(transcript[0].text, "Question")
        check.equal(transcript[1].text, "Smoke disrupts sleep.")

    def test_untouched_turns_are_shared(self) -> None:
        """Closed turns are the same objects in the new transcript."""
        before = Transcript().append_turn(Role.USER, "Q").append_turn(Role.ASSISTANT)

        after = before.append_to_open_turn("A")

        check.is_(after[0], before[0])
        check.is_not(after[1], before[1])
        check.equal(before[1].text, "")

    def test_append_to_empty_transcript_is_noop(self) -> None:
        """A fragment without an open turn is dropped without raising."""
        empty = Transcript()

        result = empty.append_to_open_turn("orphan")

        check.is_(result, empty)
        check.equal(len(result), 0)


class TestAnnotate:
    """Tests for annotate_open_turn."""

    def test_replaces_every_occurrence_of_span(self, links: FileLinks) -> None:
        """Each occurrence of the source span becomes the file marker."""
        transcript = Transcript().append_turn(Role.ASSISTANT, "A【4:0†source】 B【4:0†source】")

        result = transcript.annotate_open_turn([citation("【4:0†source】", "file-DEF")], links)

        marker = "[Assessment of the Effectiveness.pdf](/api/files/file-DEF)"
        check.equal(result.open_turn.text, f"A{marker} B{marker}")

    def test_file_path_annotation(self, links: FileLinks) -> None:
        """file_path annotations link the generated file."""
        transcript = Transcript().append_turn(
            Role.ASSISTANT, "Download sandbox:/mnt/data/out.csv"
        )
        annotation = Annotation(
            type="file_path",
            text="sandbox:/mnt/data/out.csv",
            file_path=FileReference(file_id="file-CSV"),
        )

        result = transcript.annotate_open_turn([annotation], links)

        check.equal(result.open_turn.text, "Download [file-CSV.pdf](/api/files/file-CSV)")

    def test_annotations_apply_in_order(self, links: FileLinks) -> None:
        """A later annotation may act on text introduced by an earlier one."""
        transcript = Transcript().append_turn(Role.ASSISTANT, "See [x]")
        first = citation("[x]", "file-NEW")
        # Only present once the first replacement has produced it
        second = citation("file-NEW.pdf", "file-ABC")

        result = transcript.annotate_open_turn([first, second], links)

        name = links.name_for("file-ABC")
        check.equal(
            result.open_turn.text,
            f"See [[{name}](/api/files/file-ABC)](/api/files/file-NEW)",
        )

    def test_reversed_order_skips_missing_span(self, links: FileLinks) -> None:
        """Applying the same annotations in reverse only performs the first."""
        transcript = Transcript().append_turn(Role.ASSISTANT, "See [x]")

        result = transcript.annotate_open_turn(
            [citation("file-NEW.pdf", "file-ABC"), citation("[x]", "file-NEW")], links
        )

        check.equal(result.open_turn.text, "See [file-NEW.pdf](/api/files/file-NEW)")

    def test_identical_spans_last_write_wins(self, links: FileLinks) -> None:
        """Annotations sharing a span resolve to the last one's file."""
        transcript = Transcript().append_turn(Role.ASSISTANT, "Fact【1】")

        result = transcript.annotate_open_turn(
            [citation("【1】", "file-ABC"), citation("【1】", "file-DEF")], links
        )

        check.equal(result.open_turn.text, f"Fact{links.marker_for('file-DEF')}")

    def test_unsupported_and_empty_annotations_are_ignored(self, links: FileLinks) -> None:
        """Unknown types and empty spans leave the text alone."""
        transcript = Transcript().append_turn(Role.ASSISTANT, "Plain text")
        annotations = [
            Annotation(type="url_citation", text="Plain"),
            citation("", "file-ABC"),
        ]

        result = transcript.annotate_open_turn(annotations, links)

        check.is_(result, transcript)

    def test_annotate_empty_transcript_is_noop(self, links: FileLinks) -> None:
        """Annotations without an open turn are dropped."""
        empty = Transcript()

        check.is_(empty.annotate_open_turn([citation("x", "file-ABC")], links), empty)
