"""
Cocktail Catalog Backend: Auth Route Handlers
===============================================

What:  POST /auth/signin (credentials → session token) and
       GET /auth/validate (token → current user).
Who:   The front end's login form and its on-load session check.

/auth/validate status codes:
    400  no bearer token presented
    403  token invalid or expired, or its user no longer exists
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.database import get_db_session
from cocktail_api.dependencies import (
    authenticate,
    bearer_scheme,
    get_token_service,
    get_user_service,
)
from cocktail_api.exceptions import AuthError, ValidationError
from cocktail_api.schemas.common import ErrorResponse
from cocktail_api.schemas.user import (
    SignInRequest,
    SignInResponse,
    UserResponse,
    ValidateResponse,
)
from cocktail_api.services.tokens import TokenService
from cocktail_api.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/signin",
    response_model=SignInResponse,
    responses={400: {"description": "Missing or invalid credentials", "model": ErrorResponse}},
    summary="Sign in with email and password",
)
async def sign_in(
    body: SignInRequest,
    users: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db_session),
) -> SignInResponse:
    user, token = await users.sign_in(db, body.email, body.password)
    return SignInResponse(user=UserResponse.model_validate(user), access_token=token)


@router.get(
    "/validate",
    response_model=ValidateResponse,
    responses={
        400: {"description": "No token presented", "model": ErrorResponse},
        403: {"description": "Token invalid or expired", "model": ErrorResponse},
    },
    summary="Resolve the current session token to its user",
)
async def validate_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
    users: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db_session),
) -> ValidateResponse:
    if credentials is None or not credentials.credentials:
        raise ValidationError(message="No token provided.", field="authorization")

    identity = authenticate(credentials.credentials, tokens)
    user = await users.find_user(db, identity.user_id)
    if user is None:
        logger.info("Valid token for a deleted user %s", identity.user_id)
        raise AuthError(context={"reason": "unknown_user"})

    return ValidateResponse(user=UserResponse.model_validate(user))
