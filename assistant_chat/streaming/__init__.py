"""Event stream handling for assistant runs.

Responsibilities:
    - Decoding NDJSON and SSE framed response bodies (decoder)
    - Classifying raw run events into dispatcher events (classifier)
    - Folding events into the chat state (dispatcher)
    - Tool call handler contract (tools)
"""

from assistant_chat.streaming.classifier import EventClassifier
from assistant_chat.streaming.decoder import decode_events
from assistant_chat.streaming.dispatcher import DispatchState, StreamDispatcher
from assistant_chat.streaming.tools import ToolCallHandler, empty_tool_call_handler

__all__ = [
    "DispatchState",
    "EventClassifier",
    "StreamDispatcher",
    "ToolCallHandler",
    "decode_events",
    "empty_tool_call_handler",
]
