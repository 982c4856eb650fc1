"""Client configuration with environment variable loading.

Pydantic-based configuration for the chat client. Points the client at the
assistant service and controls how cited files are named and linked.
"""

import json
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_API_BASE_URL = "http://localhost:3000/api/assistants"


def _load_file_names() -> dict[str, str]:
    """Read the file id to display name mapping from the environment.

    FILE_NAME_MAP holds an inline JSON object; FILE_NAME_MAP_PATH points at a
    JSON file. The inline form wins when both are set.
    """
    raw = os.getenv("FILE_NAME_MAP")
    if raw:
        return json.loads(raw)

    path = os.getenv("FILE_NAME_MAP_PATH")
    if path:
        return json.loads(Path(path).read_text(encoding="utf-8"))

    return {}


class ClientConfig(BaseModel):
    """Configuration for the assistant chat client.

    Attributes:
        api_base_url: Base URL of the assistant service (threads, files).
        file_route: Local route that serves file downloads, embedded in links.
        request_timeout: Timeout in seconds for assistant service requests.
        interpreter_tool_kinds: Tool call kinds rendered as code turns.
        file_names: Known file ids mapped to human-readable file names.
        display_name_limit: Longest file name shown before truncation.
        app_title: Title shown in the page header and browser tab.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("ASSISTANT_API_URL", DEFAULT_API_BASE_URL),
        description="Assistant service base URL",
    )
    file_route: str = Field(
        default_factory=lambda: os.getenv("FILE_ROUTE", "/api/files"),
        description="Local route prefix for file download links",
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "120.0")),
        gt=0.0,
        description="Request timeout in seconds",
    )
    interpreter_tool_kinds: list[str] = Field(
        default_factory=lambda: ["code_interpreter"],
        description="Tool call kinds streamed into code turns",
    )
    file_names: dict[str, str] = Field(
        default_factory=_load_file_names,
        description="File id to display name mapping",
    )
    display_name_limit: int = Field(
        default=40,
        ge=4,
        description="Maximum displayed file name length",
    )
    app_title: str = Field(
        default_factory=lambda: os.getenv("APP_TITLE", "Research Assistant"),
        description="Application title",
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop the trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                "ASSISTANT_API_URL must start with http:// or https://"
            )
        return v.rstrip("/")

    @field_validator("file_route")
    @classmethod
    def validate_file_route(cls, v: str) -> str:
        """Require an absolute route and drop the trailing slash."""
        v = v.strip().rstrip("/")
        if not v.startswith("/"):
            raise ValueError("FILE_ROUTE must start with '/' and not be the root")
        return v


def get_client_config() -> ClientConfig:
    """Create client configuration from environment.

    Returns:
        Configured ClientConfig instance.

    Raises:
        ValueError: If a configured value is invalid.
    """
    return ClientConfig()
