"""Event stream decoding.

The assistant service answers message and action submissions with a live
event stream. Two framings are accepted:

    - newline-delimited JSON, one ``{"event": ..., "data": ...}`` per line
    - Server-Sent Events frames (``event:`` / ``data:`` lines, blank line ends
      the frame); a frame without ``event:`` carries the JSON object form

Lines that cannot be decoded are logged and skipped.
"""

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator

from pydantic import ValidationError

from assistant_chat.models.schemas import RawEvent

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


def _parse_json_event(payload: str) -> RawEvent | None:
    try:
        return RawEvent.model_validate_json(payload)
    except ValidationError as e:
        logger.debug(f"Skipping malformed stream event: {e.error_count()} errors")
        return None


def _parse_frame(event_name: str | None, data_lines: list[str]) -> RawEvent | None:
    payload = "\n".join(data_lines)
    if not payload.strip() or payload.strip() == DONE_SENTINEL:
        return None

    if event_name is None:
        return _parse_json_event(payload)

    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug(f"Skipping non-JSON data for event {event_name!r}")
        return None
    return RawEvent(event=event_name, data=data)


async def decode_events(lines: AsyncIterable[str]) -> AsyncIterator[RawEvent]:
    """Decode response lines into raw events, in arrival order.

    Args:
        lines: Response body split into lines (e.g. ``response.aiter_lines()``).

    Yields:
        RawEvent for every decodable event.
    """
    event_name: str | None = None
    data_lines: list[str] = []

    async for line in lines:
        line = line.rstrip("\r")

        if not line.strip():
            if data_lines:
                event = _parse_frame(event_name, data_lines)
                if event is not None:
                    yield event
            event_name, data_lines = None, []
            continue

        if line.startswith(":"):
            # SSE comment / keep-alive
            continue
        if line.startswith("event:"):
            event_name = line.removeprefix("event:").strip()
            continue
        if line.startswith("data:"):
            data_lines.append(line.removeprefix("data:").removeprefix(" "))
            continue

        if line.lstrip().startswith("{"):
            event = _parse_json_event(line)
            if event is not None:
                yield event
            continue

        logger.debug(f"Skipping unrecognized stream line: {line[:80]!r}")

    if data_lines:
        event = _parse_frame(event_name, data_lines)
        if event is not None:
            yield event
