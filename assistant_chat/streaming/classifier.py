"""Classification of raw stream events into dispatcher events.

Two vocabularies are understood:

    - the client's own event kinds (``turn-started``, ``text-fragment``, ...),
      whose payload fields match StreamEvent
    - the assistant run events relayed verbatim by the service
      (``thread.message.delta``, ``thread.run.step.delta``,
      ``thread.run.requires_action``, ``thread.run.completed``, ...)

Run events carry deltas for content blocks and tool calls; the classifier
remembers which blocks it has seen so the first delta of a block also opens a
turn. One classifier instance serves one stream.
"""

import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from assistant_chat.models.schemas import (
    Annotation,
    RawEvent,
    StreamEvent,
    StreamEventKind,
    ToolCall,
)

logger = logging.getLogger(__name__)

_CLIENT_KINDS = {kind.value for kind in StreamEventKind}

_FAILED_RUN_EVENTS = {
    "thread.run.failed": "failed",
    "thread.run.cancelled": "cancelled",
    "thread.run.expired": "expired",
    "thread.run.incomplete": "incomplete",
}


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _block_index(value: Any) -> int | None:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class EventClassifier:
    """Turns RawEvents from one stream into StreamEvents."""

    def __init__(self) -> None:
        self._content_blocks: set[tuple[str, int]] = set()
        self._tool_call_kinds: dict[tuple[str, int], str] = {}
        self._handlers: dict[str, Callable[[str, dict[str, Any]], list[StreamEvent]]] = {
            "thread.message.delta": self._message_delta,
            "thread.run.step.delta": self._run_step_delta,
            "thread.run.requires_action": self._requires_action,
            "thread.run.completed": self._run_completed,
            "error": self._run_failed,
        }
        for name in _FAILED_RUN_EVENTS:
            self._handlers[name] = self._run_failed

    def classify(self, raw: RawEvent) -> list[StreamEvent]:
        """Classify one raw event.

        Args:
            raw: Decoded event from the response body.

        Returns:
            Zero or more StreamEvents, in the order they must be dispatched.
            Unknown or malformed events yield an empty list.
        """
        data = _as_dict(raw.data)
        try:
            if raw.event in _CLIENT_KINDS:
                return [StreamEvent.model_validate({**data, "kind": raw.event})]

            handler = self._handlers.get(raw.event)
            if handler is None:
                logger.debug(f"Ignoring stream event {raw.event!r}")
                return []
            return handler(raw.event, data)
        except ValidationError as e:
            logger.debug(f"Ignoring malformed {raw.event!r} event: {e.error_count()} errors")
            return []
        except (ValueError, TypeError) as e:
            logger.debug(f"Ignoring malformed {raw.event!r} event: {e}")
            return []

    def _message_delta(self, name: str, data: dict[str, Any]) -> list[StreamEvent]:
        message_id = str(data.get("id", ""))
        events: list[StreamEvent] = []

        for content in _as_dict(data.get("delta")).get("content") or []:
            content = _as_dict(content)
            index = _block_index(content.get("index"))
            if index is None:
                logger.debug(f"Skipping content block with invalid index in message {message_id}")
                continue
            key = (message_id, index)
            first_seen = key not in self._content_blocks
            self._content_blocks.add(key)

            if content.get("type") == "text":
                if first_seen:
                    events.append(StreamEvent(kind=StreamEventKind.TURN_STARTED))
                text = _as_dict(content.get("text"))
                annotations = text.get("annotations")
                events.append(
                    StreamEvent(
                        kind=StreamEventKind.TEXT_FRAGMENT,
                        value=text.get("value"),
                        annotations=(
                            [Annotation.model_validate(a) for a in annotations]
                            if annotations is not None
                            else None
                        ),
                    )
                )
            elif content.get("type") == "image_file" and first_seen:
                file_id = _as_dict(content.get("image_file")).get("file_id")
                if file_id:
                    events.append(
                        StreamEvent(kind=StreamEventKind.IMAGE_PRODUCED, file_id=file_id)
                    )

        return events

    def _run_step_delta(self, name: str, data: dict[str, Any]) -> list[StreamEvent]:
        step_id = str(data.get("id", ""))
        details = _as_dict(_as_dict(data.get("delta")).get("step_details"))
        if details.get("type") != "tool_calls":
            return []

        events: list[StreamEvent] = []
        for call in details.get("tool_calls") or []:
            call = _as_dict(call)
            index = _block_index(call.get("index"))
            if index is None:
                logger.debug(f"Skipping tool call with invalid index in step {step_id}")
                continue
            key = (step_id, index)
            kind = self._tool_call_kinds.get(key)
            if kind is None:
                kind = str(call.get("type", ""))
                self._tool_call_kinds[key] = kind
                events.append(
                    StreamEvent(
                        kind=StreamEventKind.TOOL_CALL_STARTED,
                        call_id=call.get("id"),
                        tool_kind=kind,
                    )
                )

            tool_input = _as_dict(call.get(kind)).get("input")
            if tool_input is not None:
                events.append(
                    StreamEvent(
                        kind=StreamEventKind.TOOL_CALL_DELTA,
                        call_id=call.get("id"),
                        tool_kind=kind,
                        tool_input=tool_input,
                    )
                )

        return events

    def _requires_action(self, name: str, data: dict[str, Any]) -> list[StreamEvent]:
        required = _as_dict(_as_dict(data.get("required_action")).get("submit_tool_outputs"))
        tool_calls: list[ToolCall] = []

        for call in required.get("tool_calls") or []:
            call = _as_dict(call)
            if not call.get("id"):
                logger.debug("Skipping pending tool call without id")
                continue
            function = _as_dict(call.get("function"))
            tool_calls.append(
                ToolCall(
                    call_id=call["id"],
                    kind=call.get("type", "function"),
                    name=function.get("name"),
                    input_payload=function.get("arguments") or "",
                )
            )

        return [
            StreamEvent(
                kind=StreamEventKind.REQUIRES_ACTION,
                run_id=data.get("id"),
                tool_calls=tool_calls,
            )
        ]

    def _run_completed(self, name: str, data: dict[str, Any]) -> list[StreamEvent]:
        return [StreamEvent(kind=StreamEventKind.RUN_COMPLETED, run_id=data.get("id"))]

    def _run_failed(self, name: str, data: dict[str, Any]) -> list[StreamEvent]:
        error = _as_dict(data.get("last_error")) or _as_dict(data.get("error")) or data
        message = error.get("message") or f"Run {_FAILED_RUN_EVENTS.get(name, 'failed')}"
        return [
            StreamEvent(
                kind=StreamEventKind.RUN_FAILED,
                run_id=data.get("id") if name != "error" else None,
                error=str(message),
            )
        ]
