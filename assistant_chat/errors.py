"""Exception hierarchy for the chat client."""


class AssistantChatError(Exception):
    """Base class for errors surfaced to the user."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AssistantAPIError(AssistantChatError):
    """A request to the assistant service failed.

    Attributes:
        message: Human-readable failure message.
        status_code: HTTP status when the service answered with an error.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SessionCreationError(AssistantAPIError):
    """Thread creation failed."""


class SubmissionError(AssistantAPIError):
    """Message or tool output submission failed."""


class FileRetrievalError(AssistantAPIError):
    """File download from the assistant service failed."""


class ToolCallError(AssistantChatError):
    """The tool call handler raised while resolving a pending call."""
