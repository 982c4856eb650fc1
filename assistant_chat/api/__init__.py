"""FastAPI endpoints served next to the chat page.

Endpoints:
    - GET /health: Service health status
    - GET /api/files/{file_id}: Download a cited or generated file
"""

from assistant_chat.api.app import create_app

__all__ = ["create_app"]
