"""
Cocktail Catalog Backend: Comment Route Handlers
==================================================

What:  Comment listing and posting for signed-in users; deletion for admins.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.database import get_db_session
from cocktail_api.dependencies import (
    AuthenticatedUser,
    get_comment_service,
    require_admin,
    require_user,
)
from cocktail_api.schemas.comment import CommentCreate, CommentResponse
from cocktail_api.schemas.common import ErrorResponse
from cocktail_api.services.comment_service import CommentService

router = APIRouter(prefix="/comment", tags=["Comments"])


@router.get("", response_model=List[CommentResponse], summary="List all comments")
async def list_comments(
    _: AuthenticatedUser = Depends(require_user),
    comments: CommentService = Depends(get_comment_service),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    return [CommentResponse.model_validate(c) for c in await comments.list_comments(db)]


@router.get(
    "/{cocktail_id}",
    response_model=List[CommentResponse],
    summary="List the comments on a cocktail",
)
async def list_for_cocktail(
    cocktail_id: UUID,
    _: AuthenticatedUser = Depends(require_user),
    comments: CommentService = Depends(get_comment_service),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    return [CommentResponse.model_validate(c) for c in await comments.list_for_cocktail(db, cocktail_id)]


@router.post(
    "",
    response_model=CommentResponse,
    responses={
        400: {"description": "Missing field or comment too long", "model": ErrorResponse},
        404: {"description": "Cocktail not found", "model": ErrorResponse},
    },
    summary="Post a comment",
)
async def add_comment(
    body: CommentCreate,
    _: AuthenticatedUser = Depends(require_user),
    comments: CommentService = Depends(get_comment_service),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return CommentResponse.model_validate(await comments.add_comment(db, body))


@router.delete(
    "/{comment_id}",
    response_model=CommentResponse,
    responses={404: {"description": "Comment not found", "model": ErrorResponse}},
    summary="Delete a comment (admin)",
)
async def delete_comment(
    comment_id: UUID,
    _: AuthenticatedUser = Depends(require_admin),
    comments: CommentService = Depends(get_comment_service),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return CommentResponse.model_validate(await comments.delete_comment(db, comment_id))
