"""HTTP client for the hosted assistant service.

Responsibilities:
    - Thread creation
    - Message and tool output submission with streamed run events
    - File downloads for cited and generated documents

Failures surface as AssistantAPIError subclasses; no request is retried.
"""

from assistant_chat.client.assistant_api import (
    AssistantClient,
    DownloadedFile,
    get_assistant_client,
)

__all__ = ["AssistantClient", "DownloadedFile", "get_assistant_client"]
