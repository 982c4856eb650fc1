"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - config: ClientConfig with a known file name mapping
    - links: FileLinks built from that config
    - assistant_service: scripted stand-in for the assistant service
    - assistant_client: AssistantClient wired to the scripted service
    - controller: SessionController over that client
"""

import pytest

from assistant_chat.citations.links import FileLinks
from assistant_chat.client.assistant_api import AssistantClient
from assistant_chat.config import ClientConfig
from assistant_chat.session.controller import SessionController
from tests.helpers import FILE_NAMES, FakeAssistantService


@pytest.fixture
def config() -> ClientConfig:
    """Return a configuration independent of the environment."""
    return ClientConfig(
        api_base_url="http://assistant.test/api/assistants",
        file_route="/api/files",
        request_timeout=5.0,
        file_names=FILE_NAMES,
        app_title="Test Assistant",
    )


@pytest.fixture
def links(config: ClientConfig) -> FileLinks:
    return FileLinks.from_config(config)


@pytest.fixture
def assistant_service() -> FakeAssistantService:
    return FakeAssistantService()


@pytest.fixture
def assistant_client(
    config: ClientConfig, assistant_service: FakeAssistantService
) -> AssistantClient:
    return AssistantClient(config=config, transport=assistant_service.transport)


@pytest.fixture
def controller(config: ClientConfig, assistant_client: AssistantClient) -> SessionController:
    return SessionController(assistant_client, config=config)
