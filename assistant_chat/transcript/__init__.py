"""Conversation transcript reducer."""

from assistant_chat.transcript.reducer import Transcript

__all__ = ["Transcript"]
