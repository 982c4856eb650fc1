"""Shared chat state observed by the UI and mutated by stream handlers."""

import logging
from collections.abc import Callable

from assistant_chat.models.schemas import Role, Session
from assistant_chat.transcript.reducer import Transcript

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ChatState:
    """Session flags plus transcript for one browser conversation.

    Listeners are called after every committed change.
    """

    def __init__(self) -> None:
        self.session = Session()
        self.transcript = Transcript()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            Callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def is_current(self, session_id: str) -> bool:
        """Whether ``session_id`` still identifies the active session."""
        return bool(session_id) and self.session.session_id == session_id

    def commit(self, transcript: Transcript) -> None:
        """Replace the transcript and notify listeners."""
        self.transcript = transcript
        self.notify()

    def record_error(self, message: str) -> None:
        """Surface a failed request as an error turn and banner.

        Input is re-enabled so the user can retry.
        """
        logger.error(f"Request failed: {message}")
        self.transcript = self.transcript.append_turn(Role.ASSISTANT, f"Error: {message}")
        self.session.last_error = message
        self.session.loading = False
        self.session.input_enabled = True
        self.notify()
