from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Speaker of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"
    CODE = "code"


class ConversationTurn(BaseModel):
    """A single turn in the transcript.

    Turns are frozen; the reducer replaces the open turn instead of editing it.

    Attributes:
        role: Who produced the turn.
        text: Accumulated turn text.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    text: str = ""


class Session(BaseModel):
    """Client-side state of the active conversation.

    Attributes:
        session_id: Assistant thread id, empty while none is active.
        input_enabled: Whether the user may submit a message.
        loading: Whether the client waits for the first token.
        last_error: Message shown in the error banner.
    """

    session_id: str = ""
    input_enabled: bool = False
    loading: bool = False
    last_error: str | None = None


class DocumentReference(BaseModel):
    """A file cited by an assistant turn.

    Attributes:
        external_file_id: File id assigned by the assistant service.
        display_name: Human-readable file name.
        reference_order: 1-based position of first citation in the turn.
        url: Local download link for the file.
    """

    model_config = ConfigDict(frozen=True)

    external_file_id: str
    display_name: str
    reference_order: int = Field(ge=1)
    url: str


class FileReference(BaseModel):
    """File id wrapper used by annotations and image content."""

    file_id: str


class Annotation(BaseModel):
    """Inline annotation attached to a text fragment.

    Attributes:
        type: Annotation kind (file_citation or file_path).
        text: Source span inside the turn text that the annotation replaces.
        file_citation: Cited file, for file_citation annotations.
        file_path: Generated file, for file_path annotations.
    """

    type: str
    text: str = ""
    file_citation: FileReference | None = None
    file_path: FileReference | None = None

    @property
    def file_id(self) -> str | None:
        if self.type == "file_citation" and self.file_citation:
            return self.file_citation.file_id
        if self.type == "file_path" and self.file_path:
            return self.file_path.file_id
        return None


class ToolCall(BaseModel):
    """A tool invocation surfaced by the assistant run.

    Attributes:
        call_id: Tool call identifier used when submitting outputs.
        kind: Tool type (code_interpreter, function, ...).
        input_payload: Accumulated input or function arguments.
        name: Function name for function tool calls.
    """

    call_id: str
    kind: str = "function"
    input_payload: str = ""
    name: str | None = None


class ToolCallOutput(BaseModel):
    """Result of one resolved tool call."""

    tool_call_id: str
    output: str


class StreamEventKind(str, Enum):
    """Kinds of events the dispatcher reacts to."""

    TURN_STARTED = "turn-started"
    TEXT_FRAGMENT = "text-fragment"
    IMAGE_PRODUCED = "image-produced"
    TOOL_CALL_STARTED = "tool-call-started"
    TOOL_CALL_DELTA = "tool-call-delta"
    REQUIRES_ACTION = "requires-action"
    RUN_COMPLETED = "run-completed"
    RUN_FAILED = "run-failed"


class RawEvent(BaseModel):
    """An undecoded event as read from the response body.

    Attributes:
        event: Event name as sent by the service.
        data: Event payload.
    """

    event: str
    data: Any = None


class StreamEvent(BaseModel):
    """A classified stream event.

    Only the fields relevant to the event kind are set.
    """

    kind: StreamEventKind
    value: str | None = None
    annotations: list[Annotation] | None = None
    file_id: str | None = None
    call_id: str | None = None
    tool_kind: str | None = None
    tool_input: str | None = None
    run_id: str | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)
    error: str | None = None


class ThreadCreated(BaseModel):
    """Response of the thread creation endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    thread_id: str = Field(alias="threadId", min_length=1)


class MessageRequest(BaseModel):
    """Body of the message submission endpoint."""

    content: str = Field(..., min_length=1)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v: str) -> str:
        """Strip whitespace from content before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ActionSubmission(BaseModel):
    """Body of the tool output submission endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    run_id: str = Field(alias="runId")
    tool_call_outputs: list[ToolCallOutput] = Field(alias="toolCallOutputs")
