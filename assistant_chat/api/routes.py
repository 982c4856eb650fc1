"""File download endpoint for cited and generated documents.

Proxies the assistant service's file download so rendered links can point at
a same-origin route.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from assistant_chat.client.assistant_api import AssistantClient, get_assistant_client
from assistant_chat.errors import FileRetrievalError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])


def _content_disposition(filename: str) -> str:
    safe_name = filename.replace('"', "").replace("\r", "").replace("\n", "")
    return f'attachment; filename="{safe_name or "download"}"'


@router.get("/{file_id}")
async def download_file(
    file_id: str,
    client: Annotated[AssistantClient, Depends(get_assistant_client)],
) -> Response:
    """Download a file from the assistant service.

    Args:
        file_id: Assistant file id taken from a rendered link.

    Returns:
        The file bytes with the upstream content type and an attachment
        Content-Disposition carrying the file name.

    Raises:
        500: The assistant service could not deliver the file.
    """
    try:
        downloaded = await client.fetch_file(file_id)
    except FileRetrievalError as e:
        logger.error(f"Error retrieving file {file_id}: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve file",
        ) from e

    return Response(
        content=downloaded.content,
        media_type=downloaded.content_type,
        headers={"Content-Disposition": _content_disposition(downloaded.filename)},
    )
