"""
Cocktail Catalog Backend: User Route Handlers
===============================================

What:  Registration (open) and account CRUD (bearer token required).
       PUT and DELETE are limited to the account owner or an admin.
How:   PUT accepts multipart (with an optional "avatar" image file) or JSON;
       an uploaded avatar is processed to the icon size before the update.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.config import Settings
from cocktail_api.database import get_db_session
from cocktail_api.dependencies import (
    AuthenticatedUser,
    get_image_service,
    get_settings,
    get_user_service,
    require_user,
)
from cocktail_api.routes.uploads import parse_fields, read_payload
from cocktail_api.schemas.common import ErrorResponse, MessageResponse
from cocktail_api.schemas.user import UserCreate, UserResponse, UserUpdate
from cocktail_api.services.image_service import ImageService
from cocktail_api.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["Users"])


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    responses={
        400: {"description": "Invalid registration data", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def create_user(
    body: UserCreate,
    users: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await users.create_user(db, body)
    return UserResponse.model_validate(user)


@router.get("", response_model=List[UserResponse], summary="List users")
async def list_users(
    _: AuthenticatedUser = Depends(require_user),
    users: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    return [UserResponse.model_validate(u) for u in await users.list_users(db)]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user",
)
async def get_user(
    user_id: UUID,
    _: AuthenticatedUser = Depends(require_user),
    users: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return UserResponse.model_validate(await users.get_user(db, user_id))


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        400: {"description": "Invalid fields or avatar", "model": ErrorResponse},
        403: {"description": "Not the account owner, or access level change by a non-admin", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Update a user (multipart, optional avatar file)",
)
async def update_user(
    user_id: UUID,
    request: Request,
    caller: AuthenticatedUser = Depends(require_user),
    users: UserService = Depends(get_user_service),
    images: ImageService = Depends(get_image_service),
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    fields, uploads = await read_payload(request, file_fields=("avatar",))
    data = parse_fields(UserUpdate, fields)
    await users.authorize_account_change(db, caller.user_id, user_id, data)

    avatar_name = None
    avatar = uploads["avatar"]
    if avatar is not None:
        avatar_name = await images.process_upload(
            avatar.filename, avatar.content,
            config.icon_width, config.icon_height,
            field="avatar",
        )

    try:
        user = await users.update_user(db, user_id, data, avatar_name=avatar_name)
    except Exception:
        await images.discard(avatar_name)
        raise
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the account owner", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Delete a user",
)
async def delete_user(
    user_id: UUID,
    caller: AuthenticatedUser = Depends(require_user),
    users: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await users.authorize_account_change(db, caller.user_id, user_id)
    return MessageResponse(message=await users.delete_user(db, user_id))
