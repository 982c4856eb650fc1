"""Stream event dispatcher.

Folds the events of one submitted message into the chat state. Dispatch is an
explicit state machine: each event kind has one handler that applies its
effect and returns the next state.

    awaiting-first-token -> streaming-text <-> streaming-tool-call
        -> awaiting-action <-> streaming-text -> completed

A run that requires action is resumed by submitting the tool outputs; the
returned stream runs through the same machine.

Every dispatcher is bound to the session id that was active when the message
was submitted. Before each mutation it checks that id against the active
session and abandons the stream once they differ.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from enum import Enum
from typing import TYPE_CHECKING

from assistant_chat.citations.links import FileLinks
from assistant_chat.errors import AssistantChatError, ToolCallError
from assistant_chat.models.schemas import (
    RawEvent,
    Role,
    StreamEvent,
    StreamEventKind,
    ToolCall,
    ToolCallOutput,
)
from assistant_chat.state import ChatState
from assistant_chat.streaming.classifier import EventClassifier
from assistant_chat.streaming.tools import ToolCallHandler, empty_tool_call_handler

if TYPE_CHECKING:
    from assistant_chat.client.assistant_api import AssistantClient

logger = logging.getLogger(__name__)


class DispatchState(str, Enum):
    """States of one message's stream."""

    AWAITING_FIRST_TOKEN = "awaiting-first-token"
    STREAMING_TEXT = "streaming-text"
    STREAMING_TOOL_CALL = "streaming-tool-call"
    AWAITING_ACTION = "awaiting-action"
    COMPLETED = "completed"
    FAILED = "failed"
    STALE = "stale"


TERMINAL_STATES = frozenset(
    {DispatchState.COMPLETED, DispatchState.FAILED, DispatchState.STALE}
)

Handler = Callable[[DispatchState, StreamEvent], Awaitable[DispatchState]]


class StreamDispatcher:
    """Applies stream events for one submission to the chat state."""

    def __init__(
        self,
        state: ChatState,
        session_id: str,
        client: "AssistantClient",
        links: FileLinks,
        tool_call_handler: ToolCallHandler = empty_tool_call_handler,
        interpreter_tool_kinds: frozenset[str] = frozenset({"code_interpreter"}),
    ) -> None:
        """Initialize the dispatcher.

        Args:
            state: Chat state to mutate.
            session_id: Session the submission belongs to (fencing token).
            client: Assistant client used to submit tool outputs.
            links: Formats file markers for annotations and images.
            tool_call_handler: Resolves tool calls when the run requires action.
            interpreter_tool_kinds: Tool kinds whose input is shown as code turns.
        """
        self._state = state
        self._session_id = session_id
        self._client = client
        self._links = links
        self._tool_call_handler = tool_call_handler
        self._interpreter_tool_kinds = interpreter_tool_kinds
        self._handlers: dict[StreamEventKind, Handler] = {
            StreamEventKind.TURN_STARTED: self._on_turn_started,
            StreamEventKind.TEXT_FRAGMENT: self._on_text_fragment,
            StreamEventKind.IMAGE_PRODUCED: self._on_image_produced,
            StreamEventKind.TOOL_CALL_STARTED: self._on_tool_call_started,
            StreamEventKind.TOOL_CALL_DELTA: self._on_tool_call_delta,
            StreamEventKind.REQUIRES_ACTION: self._on_requires_action,
            StreamEventKind.RUN_COMPLETED: self._on_run_completed,
            StreamEventKind.RUN_FAILED: self._on_run_failed,
        }

    @property
    def is_current(self) -> bool:
        return self._state.is_current(self._session_id)

    async def run(self, events: AsyncIterator[RawEvent]) -> DispatchState:
        """Dispatch a stream until it ends or reaches a terminal event.

        Request failures become an error turn; input is re-enabled whenever
        the stream stops.

        Args:
            events: Raw events of the submission's response.

        Returns:
            The final dispatch state.
        """
        try:
            final = await self._consume(events, DispatchState.AWAITING_FIRST_TOKEN)
        except AssistantChatError as e:
            return self._fail(e.message)

        if final not in TERMINAL_STATES and self.is_current:
            logger.warning(f"Stream closed in state {final.value} without a terminal event")
            self._state.session.loading = False
            self._state.session.input_enabled = True
            self._state.notify()
        return final

    async def dispatch(self, current: DispatchState, event: StreamEvent) -> DispatchState:
        """Apply one event and return the next state.

        Events for a superseded session are discarded.
        """
        if not self.is_current:
            logger.debug(f"Discarding {event.kind.value} for stale session {self._session_id}")
            return DispatchState.STALE
        return await self._handlers[event.kind](current, event)

    async def _consume(
        self,
        events: AsyncIterator[RawEvent],
        current: DispatchState,
    ) -> DispatchState:
        classifier = EventClassifier()
        async with aclosing(events):
            async for raw in events:
                for event in classifier.classify(raw):
                    current = await self.dispatch(current, event)
                    if current in TERMINAL_STATES:
                        return current
        return current

    def _fail(self, message: str) -> DispatchState:
        if not self.is_current:
            logger.debug(f"Discarding failure for stale session {self._session_id}: {message}")
            return DispatchState.STALE
        self._state.record_error(message)
        return DispatchState.FAILED

    async def _on_turn_started(self, current: DispatchState, event: StreamEvent) -> DispatchState:
        self._state.session.loading = False
        self._state.commit(self._state.transcript.append_turn(Role.ASSISTANT))
        return DispatchState.STREAMING_TEXT

    async def _on_text_fragment(self, current: DispatchState, event: StreamEvent) -> DispatchState:
        transcript = self._state.transcript
        if event.value is not None:
            transcript = transcript.append_to_open_turn(event.value)
        if event.annotations is not None:
            transcript = transcript.annotate_open_turn(event.annotations, self._links)
        self._state.commit(transcript)
        return DispatchState.STREAMING_TEXT

    async def _on_image_produced(self, current: DispatchState, event: StreamEvent) -> DispatchState:
        if not event.file_id:
            return current
        self._state.commit(
            self._state.transcript.append_to_open_turn(self._links.image_for(event.file_id))
        )
        return current

    async def _on_tool_call_started(
        self, current: DispatchState, event: StreamEvent
    ) -> DispatchState:
        if event.tool_kind not in self._interpreter_tool_kinds:
            return current
        self._state.session.loading = False
        self._state.commit(self._state.transcript.append_turn(Role.CODE))
        return DispatchState.STREAMING_TOOL_CALL

    async def _on_tool_call_delta(self, current: DispatchState, event: StreamEvent) -> DispatchState:
        if event.tool_kind not in self._interpreter_tool_kinds or not event.tool_input:
            return current
        self._state.commit(self._state.transcript.append_to_open_turn(event.tool_input))
        return current

    async def _on_requires_action(
        self, current: DispatchState, event: StreamEvent
    ) -> DispatchState:
        if not event.run_id:
            logger.warning("Ignoring requires-action event without run id")
            return current

        tasks = [asyncio.create_task(self._resolve(call)) for call in event.tool_calls]
        try:
            outputs = await asyncio.gather(*tasks)
        except ToolCallError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        if not self.is_current:
            return DispatchState.STALE

        self._state.session.input_enabled = False
        self._state.notify()
        logger.info(f"Submitting {len(outputs)} tool outputs for run {event.run_id}")

        resumed = self._client.submit_tool_outputs(self._session_id, event.run_id, list(outputs))
        return await self._consume(resumed, DispatchState.AWAITING_ACTION)

    async def _resolve(self, tool_call: ToolCall) -> ToolCallOutput:
        try:
            output = await self._tool_call_handler(tool_call)
        except Exception as e:
            raise ToolCallError(f"Tool call {tool_call.call_id} failed: {e}") from e
        return ToolCallOutput(tool_call_id=tool_call.call_id, output=output)

    async def _on_run_completed(self, current: DispatchState, event: StreamEvent) -> DispatchState:
        self._state.session.loading = False
        self._state.session.input_enabled = True
        self._state.notify()
        return DispatchState.COMPLETED

    async def _on_run_failed(self, current: DispatchState, event: StreamEvent) -> DispatchState:
        return self._fail(event.error or "Run failed")
