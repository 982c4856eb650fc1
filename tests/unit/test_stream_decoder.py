"""Unit tests for event stream decoding."""

import json

import pytest_check as check

from assistant_chat.models.schemas import RawEvent
from assistant_chat.streaming.decoder import decode_events
from tests.helpers import lines_of


async def collect(*lines: str) -> list[RawEvent]:
    return [event async for event in decode_events(lines_of(*lines))]


class TestNewlineDelimitedJson:
    """Tests for one-object-per-line streams."""

    async def test_decodes_each_line_in_order(self) -> None:
        """Every JSON line becomes one RawEvent."""
        events = await collect(
            json.dumps({"event": "turn-started", "data": {}}),
            json.dumps({"event": "text-fragment", "data": {"value": "Hi"}}),
        )

        check.equal([e.event for e in events], ["turn-started", "text-fragment"])
        check.equal(events[1].data, {"value": "Hi"})

    async def test_malformed_lines_are_skipped(self) -> None:
        """Broken JSON and unknown lines do not stop the stream."""
        events = await collect(
            '{"event": "turn-started", ',
            "garbage",
            '{"data": {}}',
            json.dumps({"event": "run-completed"}),
        )

        check.equal([e.event for e in events], ["run-completed"])
        check.is_none(events[0].data)


class TestServerSentEvents:
    """Tests for SSE framed streams."""

    async def test_named_frames(self) -> None:
        """event: and data: lines form one event per frame."""
        events = await collect(
            "event: thread.run.completed",
            'data: {"id": "run_1"}',
            "",
            "event: done",
            "data: [DONE]",
            "",
        )

        check.equal(len(events), 1)
        check.equal(events[0].event, "thread.run.completed")
        check.equal(events[0].data, {"id": "run_1"})

    async def test_unnamed_frame_carries_json_object(self) -> None:
        """A frame without event: holds the {"event", "data"} object form."""
        events = await collect(
            'data: {"event": "text-fragment", "data": {"value": "x"}}',
            "",
        )

        check.equal(events[0].event, "text-fragment")
        check.equal(events[0].data, {"value": "x"})

    async def test_multiline_data_and_comments(self) -> None:
        """Data lines are joined and comment lines ignored."""
        events = await collect(
            ": keep-alive",
            "event: text-fragment\r",
            'data: {"value":',
            'data: "joined"}',
            "",
        )

        check.equal(events[0].data, {"value": "joined"})

    async def test_final_frame_without_blank_line_is_flushed(self) -> None:
        """The last frame is emitted even when the body ends mid-frame."""
        events = await collect("event: run-completed", "data: {}")

        check.equal([e.event for e in events], ["run-completed"])

    async def test_non_json_data_is_skipped(self) -> None:
        """Frames whose data is not JSON are dropped."""
        events = await collect(
            "event: text-fragment",
            "data: not json",
            "",
            "event: run-completed",
            "data: {}",
            "",
        )

        check.equal([e.event for e in events], ["run-completed"])
