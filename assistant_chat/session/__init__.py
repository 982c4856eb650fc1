"""Session lifecycle and shared chat state.

Responsibilities:
    - Thread creation at mount and on reset
    - Input enable/disable, loading and error flags
    - Message submission through the stream dispatcher
    - Fencing stale streams by session id
"""

from assistant_chat.session.controller import SessionController
from assistant_chat.state import ChatState

__all__ = ["ChatState", "SessionController"]
