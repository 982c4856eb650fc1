"""Pydantic models shared across the chat client.

Models:
    - ConversationTurn: One transcript entry (user, assistant or code)
    - Session: Thread id plus input/loading/error flags
    - DocumentReference: A cited file with its display order
    - ToolCall / ToolCallOutput: Tool invocations and their results
    - RawEvent / StreamEvent: Undecoded and classified stream events
    - ThreadCreated / MessageRequest / ActionSubmission: Wire payloads
"""

from assistant_chat.models.schemas import (
    ActionSubmission,
    Annotation,
    ConversationTurn,
    DocumentReference,
    FileReference,
    MessageRequest,
    RawEvent,
    Role,
    Session,
    StreamEvent,
    StreamEventKind,
    ThreadCreated,
    ToolCall,
    ToolCallOutput,
)

__all__ = [
    "ActionSubmission",
    "Annotation",
    "ConversationTurn",
    "DocumentReference",
    "FileReference",
    "MessageRequest",
    "RawEvent",
    "Role",
    "Session",
    "StreamEvent",
    "StreamEventKind",
    "ThreadCreated",
    "ToolCall",
    "ToolCallOutput",
]
