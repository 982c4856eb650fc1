"""Session controller for one browser conversation.

Owns the thread lifecycle (create at mount, recreate on reset), the input,
loading and error flags, and message submission.

Reset is client-side abandonment: clearing the session id fences every
dispatcher bound to the old thread, so their late events are dropped. The
assistant run on the old thread is not cancelled.
"""

import logging

from assistant_chat.citations.links import FileLinks
from assistant_chat.client.assistant_api import AssistantClient
from assistant_chat.config import ClientConfig, get_client_config
from assistant_chat.errors import SessionCreationError
from assistant_chat.models.schemas import Role, Session
from assistant_chat.state import ChatState
from assistant_chat.streaming.dispatcher import DispatchState, StreamDispatcher
from assistant_chat.streaming.tools import ToolCallHandler, empty_tool_call_handler
from assistant_chat.transcript.reducer import Transcript

logger = logging.getLogger(__name__)


class SessionController:
    """Drives a conversation against the assistant service.

    Typical lifecycle:
        controller = SessionController(client)
        await controller.start()
        await controller.submit("How is sleep affected by wildfires?")
        await controller.reset()
    """

    def __init__(
        self,
        client: AssistantClient,
        config: ClientConfig | None = None,
        tool_call_handler: ToolCallHandler = empty_tool_call_handler,
        state: ChatState | None = None,
    ) -> None:
        self._client = client
        self._config = config or get_client_config()
        self._tool_call_handler = tool_call_handler
        self.state = state or ChatState()
        self.links = FileLinks.from_config(self._config)
        self._generation = 0

    @property
    def session(self) -> Session:
        return self.state.session

    @property
    def transcript(self) -> Transcript:
        return self.state.transcript

    async def start(self) -> bool:
        """Create the first session. Call once when the page mounts."""
        return await self._create_session()

    async def reset(self) -> bool:
        """Start over on a fresh thread.

        Clears transcript and error, disables input until the new thread
        exists. If another reset starts meanwhile, this one's result is
        discarded.

        Returns:
            True if this reset installed a new session.
        """
        logger.info("Resetting chat session")
        self.state.session = Session()
        self.state.transcript = Transcript()
        self.state.notify()
        return await self._create_session()

    async def submit(self, text: str) -> DispatchState | None:
        """Send a user message and dispatch the streamed reply.

        Args:
            text: User input.

        Returns:
            Final dispatch state, or None if the input was not accepted.
        """
        text = text.strip()
        session = self.state.session
        if not text or not session.input_enabled:
            return None

        session.input_enabled = False
        session.loading = True
        session.last_error = None
        self.state.commit(self.state.transcript.append_turn(Role.USER, text))

        if not session.session_id and not await self._create_session(keep_input_disabled=True):
            return DispatchState.FAILED

        session_id = self.state.session.session_id
        dispatcher = StreamDispatcher(
            state=self.state,
            session_id=session_id,
            client=self._client,
            links=self.links,
            tool_call_handler=self._tool_call_handler,
            interpreter_tool_kinds=frozenset(self._config.interpreter_tool_kinds),
        )
        final = await dispatcher.run(self._client.stream_message(session_id, text))
        logger.info(f"Message dispatch finished in state {final.value}")
        return final

    def dismiss_error(self) -> None:
        self.state.session.last_error = None
        self.state.notify()

    async def _create_session(self, keep_input_disabled: bool = False) -> bool:
        self._generation += 1
        generation = self._generation
        self.state.session.input_enabled = False
        self.state.notify()

        try:
            thread_id = await self._client.create_thread()
        except SessionCreationError as e:
            if generation == self._generation:
                self.state.record_error(e.message)
            return False

        if generation != self._generation:
            logger.debug(f"Discarding superseded thread {thread_id}")
            return False

        self.state.session.session_id = thread_id
        if not keep_input_disabled:
            self.state.session.input_enabled = True
        self.state.notify()
        return True
