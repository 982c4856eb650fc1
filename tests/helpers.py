"""Stream encoders and a scripted assistant service for tests."""

import json
from collections.abc import AsyncIterable, Awaitable, Callable
from typing import Any

import httpx

from assistant_chat.models.schemas import RawEvent

FILE_NAMES = {
    "file-ABC": "A Systematic Review of the Impact of Wildfires on Sleep Disturbances.pdf",
    "file-DEF": "Assessment of the Effectiveness.pdf",
}


def ndjson(*events: tuple[str, dict[str, Any]]) -> bytes:
    """Encode (event, data) pairs as newline-delimited JSON."""
    return b"".join(
        json.dumps({"event": name, "data": data}).encode() + b"\n" for name, data in events
    )


def sse(*events: tuple[str, dict[str, Any]]) -> bytes:
    """Encode (event, data) pairs as Server-Sent Events frames."""
    return b"".join(
        f"event: {name}\ndata: {json.dumps(data)}\n\n".encode() for name, data in events
    )


async def raw_stream(*events: tuple[str, Any]) -> AsyncIterable[RawEvent]:
    """Yield (event, data) pairs as RawEvents."""
    for name, data in events:
        yield RawEvent(event=name, data=data)


async def lines_of(*lines: str) -> AsyncIterable[str]:
    for line in lines:
        yield line


StreamBody = bytes | AsyncIterable[bytes] | httpx.Response


class FakeAssistantService:
    """Scripted assistant service served through httpx.MockTransport.

    Queue a response body per expected message or action submission; every
    request is recorded for assertions.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.threads_created = 0
        self.thread_failures = 0
        self.thread_hook: Callable[[], Awaitable[None]] | None = None
        self.message_bodies: list[StreamBody] = []
        self.action_bodies: list[StreamBody] = []
        self.files: dict[str, httpx.Response] = {}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def posted_json(self, suffix: str) -> list[dict[str, Any]]:
        """Return JSON bodies of recorded POSTs whose path ends with suffix."""
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == "POST" and r.url.path.endswith(suffix)
        ]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/threads"):
            if self.thread_hook is not None:
                await self.thread_hook()
            if self.thread_failures:
                self.thread_failures -= 1
                return httpx.Response(503, text="unavailable")
            self.threads_created += 1
            return httpx.Response(200, json={"threadId": f"thread-{self.threads_created}"})

        if path.endswith("/messages"):
            return self._stream(self.message_bodies.pop(0))

        if path.endswith("/actions"):
            return self._stream(self.action_bodies.pop(0))

        if "/files/" in path:
            file_id = path.rsplit("/", 1)[-1]
            return self.files.get(file_id, httpx.Response(404, text="not found"))

        return httpx.Response(404)

    @staticmethod
    def _stream(body: StreamBody) -> httpx.Response:
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(
            200, headers={"content-type": "text/event-stream"}, content=body
        )
