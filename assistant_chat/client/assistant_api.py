"""HTTP client for the assistant service.

Wraps httpx.AsyncClient for the four service endpoints and converts transport
and status failures into AssistantAPIError subclasses.

Endpoints:
    - POST /threads: create a conversation thread
    - POST /threads/{id}/messages: submit a message, stream the run
    - POST /threads/{id}/actions: submit tool outputs, stream the run
    - GET /files/{file_id}: download a file
"""

import logging
import re
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from assistant_chat.config import ClientConfig, get_client_config
from assistant_chat.errors import (
    FileRetrievalError,
    SessionCreationError,
    SubmissionError,
)
from assistant_chat.models.schemas import (
    ActionSubmission,
    MessageRequest,
    RawEvent,
    ThreadCreated,
    ToolCallOutput,
)
from assistant_chat.streaming.decoder import decode_events

logger = logging.getLogger(__name__)

_FILENAME = re.compile(r"filename\*?=(?:UTF-8'')?\"?([^\";]+)\"?", re.IGNORECASE)


@dataclass
class DownloadedFile:
    """File bytes plus the metadata needed to serve them."""

    content: bytes
    content_type: str
    filename: str


def _filename_from_disposition(header: str | None) -> str:
    if header:
        match = _FILENAME.search(header)
        if match:
            return match.group(1).strip()
    return "download"


class AssistantClient:
    """Async client for the assistant service.

    A fresh httpx.AsyncClient is opened per request; streams stay open for as
    long as the caller iterates them.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Optional client configuration.
                    Loads from environment if not provided.
            transport: Optional httpx transport (used by tests).
        """
        self._config = config or get_client_config()
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.api_base_url,
            timeout=self._config.request_timeout,
            transport=self._transport,
        )

    async def create_thread(self) -> str:
        """Create a new conversation thread.

        Returns:
            The new thread id.

        Raises:
            SessionCreationError: If the request fails or the reply has no id.
        """
        async with self._http() as client:
            try:
                response = await client.post("/threads")
                response.raise_for_status()
                thread = ThreadCreated.model_validate_json(response.content)
            except httpx.HTTPStatusError as e:
                raise SessionCreationError(
                    f"HTTP {e.response.status_code}", status_code=e.response.status_code
                ) from e
            except httpx.RequestError as e:
                raise SessionCreationError(f"Connection failed: {e}") from e
            except ValidationError as e:
                raise SessionCreationError("Invalid thread creation response") from e

        logger.info(f"Created thread {thread.thread_id}")
        return thread.thread_id

    def stream_message(self, thread_id: str, content: str) -> AsyncIterator[RawEvent]:
        """Submit a user message and stream the resulting run.

        Args:
            thread_id: Thread to post to.
            content: Message text.

        Returns:
            Async iterator of raw events; the request is sent on first
            iteration. Iteration raises SubmissionError on failure.
        """
        body = MessageRequest(content=content).model_dump()
        return self._stream(f"/threads/{thread_id}/messages", body)

    def submit_tool_outputs(
        self,
        thread_id: str,
        run_id: str,
        outputs: list[ToolCallOutput],
    ) -> AsyncIterator[RawEvent]:
        """Submit tool call outputs and stream the resumed run.

        Args:
            thread_id: Thread the run belongs to.
            run_id: Run waiting for the outputs.
            outputs: One output per pending tool call.

        Returns:
            Async iterator of raw events, as for stream_message.
        """
        body = ActionSubmission(run_id=run_id, tool_call_outputs=outputs).model_dump(
            by_alias=True
        )
        return self._stream(f"/threads/{thread_id}/actions", body)

    async def _stream(self, path: str, body: dict[str, Any]) -> AsyncIterator[RawEvent]:
        async with self._http() as client:
            try:
                async with client.stream(
                    "POST",
                    path,
                    json=body,
                    headers={"Accept": "text/event-stream"},
                ) as response:
                    response.raise_for_status()
                    async for event in decode_events(response.aiter_lines()):
                        yield event
            except httpx.HTTPStatusError as e:
                raise SubmissionError(
                    f"HTTP {e.response.status_code}", status_code=e.response.status_code
                ) from e
            except httpx.RequestError as e:
                raise SubmissionError(f"Connection failed: {e}") from e

    async def fetch_file(self, file_id: str) -> DownloadedFile:
        """Download a file from the assistant service.

        Args:
            file_id: Assistant file id.

        Returns:
            DownloadedFile with bytes, content type and filename.

        Raises:
            FileRetrievalError: If the download fails.
        """
        async with self._http() as client:
            try:
                response = await client.get(f"/files/{file_id}")
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise FileRetrievalError(
                    f"HTTP {e.response.status_code}", status_code=e.response.status_code
                ) from e
            except httpx.RequestError as e:
                raise FileRetrievalError(f"Connection failed: {e}") from e

        return DownloadedFile(
            content=response.content,
            content_type=response.headers.get("content-type") or "application/octet-stream",
            filename=_filename_from_disposition(response.headers.get("content-disposition")),
        )


# Module-level singleton instance
_assistant_client: AssistantClient | None = None


def get_assistant_client() -> AssistantClient:
    """Get or create the global assistant client.

    Returns:
        The AssistantClient instance.
    """
    global _assistant_client
    if _assistant_client is None:
        _assistant_client = AssistantClient()
    return _assistant_client
