"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assistant_chat import __version__
from assistant_chat.api.routes import router as files_router
from assistant_chat.config import ClientConfig, get_client_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting assistant chat...")
    yield
    # Shutdown
    logger.info("Shutting down assistant chat...")


def create_app(config: ClientConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Optional client configuration.
                Loads from environment if not provided.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or get_client_config()

    application = FastAPI(
        title=config.app_title,
        description=(
            "Browser chat client for a hosted assistant service. Streams "
            "assistant runs into a conversation transcript and serves cited "
            "documents for download."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(files_router, prefix=config.file_route)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "assistant-chat"}

    return application
