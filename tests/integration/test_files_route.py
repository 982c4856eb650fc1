"""Integration tests for the file download proxy and health endpoint.

Runs the FastAPI app through httpx ASGITransport with the assistant client
pointed at the scripted assistant service.
"""

from collections.abc import AsyncIterator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from assistant_chat.api.app import create_app
from assistant_chat.client.assistant_api import AssistantClient, get_assistant_client
from assistant_chat.config import ClientConfig
from tests.helpers import FakeAssistantService


class TestFilesEndpoint:
    """Integration tests for GET /api/files/{file_id}."""

    @pytest.fixture
    async def client(
        self, config: ClientConfig, assistant_client: AssistantClient
    ) -> AsyncIterator[AsyncClient]:
        """Create async HTTP client with ASGI transport."""
        app = create_app(config)
        app.dependency_overrides[get_assistant_client] = lambda: assistant_client
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    async def test_download_returns_attachment(
        self, client: AsyncClient, assistant_service: FakeAssistantService
    ) -> None:
        """File bytes are served with the upstream type and file name."""
        assistant_service.files["file-ABC"] = httpx.Response(
            200,
            content=b"%PDF-1.4 wildfire",
            headers={
                "content-type": "application/pdf",
                "content-disposition": 'attachment; filename="Review.pdf"',
            },
        )

        response = await client.get("/api/files/file-ABC")

        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 wildfire"
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="Review.pdf"'

    async def test_download_failure_returns_500(self, client: AsyncClient) -> None:
        """Upstream failures map to 500 with a fixed message."""
        response = await client.get("/api/files/file-MISSING")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to retrieve file"}

    async def test_stray_quote_ends_filename(
        self, client: AsyncClient, assistant_service: FakeAssistantService
    ) -> None:
        """A quote inside an unquoted file name cannot leak into the header."""
        assistant_service.files["file-Q"] = httpx.Response(
            200,
            content=b"x",
            headers={"content-disposition": "attachment; filename=bad\"name.txt"},
        )

        response = await client.get("/api/files/file-Q")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="bad"'

    async def test_custom_route(
        self,
        config: ClientConfig,
        assistant_client: AssistantClient,
        assistant_service: FakeAssistantService,
    ) -> None:
        """The download route follows the configured prefix."""
        assistant_service.files["file-ABC"] = httpx.Response(200, content=b"x")
        app = create_app(config.model_copy(update={"file_route": "/downloads"}))
        app.dependency_overrides[get_assistant_client] = lambda: assistant_client

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/downloads/file-ABC")
            missing = await client.get("/api/files/file-ABC")

        assert response.status_code == 200
        assert missing.status_code == 404


class TestHealthEndpoint:
    """Integration tests for GET /health."""

    async def test_health_check(self, config: ClientConfig) -> None:
        """Health endpoint reports the service name."""
        transport = ASGITransport(app=create_app(config))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "assistant-chat"}
