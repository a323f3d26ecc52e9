"""
Cocktail Catalog Backend: Route Dependencies (Auth Gate + Services)
=====================================================================

What:  FastAPI dependencies that hand routes their services and guard
       protected endpoints.
How:   Services live on app.state (built once by create_app()); the getters
       below read them from the current request's app.
Who:   Every route module.

Auth Gate:
    Authorization header            Result
    ─────────────────────────────── ───────────────────────────────────────
    missing / not "Bearer <token>"  AuthError 401 + WWW-Authenticate: Bearer
    token fails verification        AuthError 403
    token valid                     AuthenticatedUser on request.state.user

    On failure the dependency raises, so the handler never runs.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.config import Settings
from cocktail_api.database import get_db_session
from cocktail_api.exceptions import AuthError
from cocktail_api.services.cocktail_service import CocktailService
from cocktail_api.services.comment_service import CommentService
from cocktail_api.services.credentials import CredentialCodec
from cocktail_api.services.image_service import ImageService
from cocktail_api.services.spirit_service import SpiritService
from cocktail_api.services.tokens import TokenService
from cocktail_api.services.user_service import UserService

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is reported as our own AuthError (401)
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """Identity established by a verified session token."""
    user_id: UUID
    claims: Dict[str, Any] = field(default_factory=dict)


# ── Service getters ───────────────────────────────────────────────────────

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_credential_codec(request: Request) -> CredentialCodec:
    return request.app.state.credential_codec


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_image_service(request: Request) -> ImageService:
    return request.app.state.image_service


def get_cocktail_service(request: Request) -> CocktailService:
    return request.app.state.cocktail_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_spirit_service(request: Request) -> SpiritService:
    return request.app.state.spirit_service


def get_comment_service(request: Request) -> CommentService:
    return request.app.state.comment_service


# ── Auth Gate ─────────────────────────────────────────────────────────────

def authenticate(token: str, tokens: TokenService) -> AuthenticatedUser:
    """Verify a raw token and build the caller identity. Raises AuthError (403)."""
    claims = tokens.verify(token)
    try:
        user_id = UUID(str(claims["sub"]))
    except (KeyError, ValueError) as e:
        logger.info("Rejected session token with unusable subject")
        raise AuthError(context={"reason": "invalid_subject"}) from e
    return AuthenticatedUser(user_id=user_id, claims=claims)


async def require_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> AuthenticatedUser:
    """Admit the request only with a valid bearer token."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthError(status_code=401, context={"reason": "missing_token"})

    user = authenticate(credentials.credentials, tokens)
    request.state.user = user
    return user


async def require_admin(
    user: AuthenticatedUser = Depends(require_user),
    users: UserService = Depends(get_user_service),
    db: AsyncSession = Depends(get_db_session),
) -> AuthenticatedUser:
    """require_user, plus an access level of at least the configured admin level."""
    if not users.is_admin(await users.find_user(db, user.user_id)):
        logger.info("Admin access denied for user %s", user.user_id)
        raise AuthError(context={"reason": "insufficient_access_level"})
    return user
