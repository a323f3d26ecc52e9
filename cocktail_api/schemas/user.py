"""User, sign-in and token-validation schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from cocktail_api.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Body of POST /user. New accounts always start at access level 1."""
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, description="Minimum of 6 characters")
    avatar: Optional[str] = None
    bio: Optional[str] = None


class UserUpdate(CamelModel):
    """
    Fields accepted by PUT /user/{id}; all optional (partial update).

    access_level is honoured only when an admin makes the change.
    """
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    access_level: Optional[int] = Field(default=None, ge=0)
    avatar: Optional[str] = None
    bio: Optional[str] = None
    new_user: Optional[bool] = None


class UserResponse(CamelModel):
    """
    Public representation of a user.

    Has no password field: the digest never leaves the server.
    """
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    access_level: int
    avatar: Optional[str] = None
    bio: Optional[str] = None
    new_user: bool
    created_at: datetime
    updated_at: datetime


class SignInRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SignInResponse(CamelModel):
    user: UserResponse
    access_token: str


class ValidateResponse(CamelModel):
    user: UserResponse
