"""Main application entry point.

Runs FastAPI with NiceGUI mounted for the chat interface.
Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run FastAPI with NiceGUI mounted on the same server.

    FastAPI serves the file download proxy, NiceGUI serves the chat page.
    """
    import uvicorn
    from nicegui import ui

    from assistant_chat.api.app import create_app
    from assistant_chat.config import get_client_config
    from assistant_chat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    config = get_client_config()
    app = create_app(config)

    # Mount NiceGUI onto FastAPI
    ui.run_with(
        app,
        title=config.app_title,
        favicon="📄",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "assistant-chat-secret"),
    )

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Assistant service at {config.api_base_url}")
    logger.info(f"Chat UI available at http://localhost:{port}/")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
