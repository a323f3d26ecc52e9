"""
Cocktail Catalog Backend: Image Route
=======================================

What:  GET /images/{file_path} serves processed derivatives (cocktail icons,
       headers, avatars) from the processed image directory.
Who:   <img> tags in the front end, using the filename stored on a record.

Security:
    The requested path is resolved and must stay inside the processed
    directory; anything escaping it (../../etc/passwd) is rejected with 400.
"""

import logging
import mimetypes

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from cocktail_api.dependencies import get_image_service
from cocktail_api.exceptions import NotFoundError, ValidationError
from cocktail_api.schemas.common import ErrorResponse
from cocktail_api.services.image_service import ImageService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Images"])

# Derivatives never change under a given name
CACHE_CONTROL = "public, max-age=86400"


@router.get(
    "/images/{file_path:path}",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Path escapes the image directory", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve a processed image",
)
async def serve_image(
    file_path: str,
    images: ImageService = Depends(get_image_service),
) -> FileResponse:
    root = images.processed_root.resolve()
    full_path = (root / file_path).resolve()

    if not full_path.is_relative_to(root):
        logger.warning("Rejected image path outside storage: %s", file_path)
        raise ValidationError(message="Invalid file path")

    if not full_path.is_file():
        raise NotFoundError(resource="image", resource_id=file_path)

    media_type = mimetypes.guess_type(full_path.name)[0] or "application/octet-stream"
    return FileResponse(
        path=str(full_path),
        media_type=media_type,
        headers={"Cache-Control": CACHE_CONTROL},
    )
