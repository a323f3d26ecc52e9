"""
Cocktail Catalog Backend: User Service
========================================

What:  Registration, sign-in, profile CRUD.
How:   Passwords pass through CredentialCodec before they reach the model;
       sign-in returns a session token from TokenService.
Who:   /auth and /user route handlers.

Account changes:
    PUT and DELETE /user/{id} are open to the account owner and to admins;
    only admins may change access_level. Registration always grants level 1.

Sign-in failure policy:
    Unknown email and wrong password produce the same ValidationError so the
    endpoint cannot be used to discover which emails are registered.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.database import store_errors
from cocktail_api.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from cocktail_api.models.user import User
from cocktail_api.schemas.user import UserCreate, UserUpdate
from cocktail_api.services.credentials import CredentialCodec
from cocktail_api.services.tokens import TokenService

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:

    def __init__(self, codec: CredentialCodec, tokens: TokenService, admin_level: int = 2):
        self.codec = codec
        self.tokens = tokens
        self.admin_level = admin_level

    def is_admin(self, user: Optional[User]) -> bool:
        return user is not None and user.access_level >= self.admin_level

    async def authorize_account_change(
        self,
        db: AsyncSession,
        actor_id: UUID,
        user_id: UUID,
        data: Optional[UserUpdate] = None,
    ) -> None:
        """
        Allow a change to account `user_id` by `actor_id`.

        Users may edit or delete their own account; admins may edit or
        delete any account. Only admins may change an access level.

        Raises:
            AuthError (403): the actor is not allowed to make this change
        """
        actor_is_admin = self.is_admin(await self.find_user(db, actor_id))
        if actor_id != user_id and not actor_is_admin:
            logger.info("User %s denied changes to account %s", actor_id, user_id)
            raise AuthError(context={"reason": "not_account_owner"})
        if data is not None and data.access_level is not None and not actor_is_admin:
            logger.info("User %s denied access level change on %s", actor_id, user_id)
            raise AuthError(context={"reason": "insufficient_access_level"})

    async def sign_in(self, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        """
        Verify credentials and mint a session token.

        Returns:
            (user, access_token)

        Raises:
            ValidationError: unknown email or wrong password
        """
        user = await self._find_by_email(db, normalize_email(email))
        if user is None or not self.codec.verify(password, user.password):
            logger.info("Sign-in rejected for %s", normalize_email(email))
            raise ValidationError(message="Username or password invalid.")

        token = self.tokens.issue({"sub": str(user.id)})
        logger.info("User signed in: %s", user.id)
        return user, token

    async def create_user(self, db: AsyncSession, data: UserCreate) -> User:
        email = normalize_email(data.email)
        if await self._find_by_email(db, email) is not None:
            raise ConflictError(message="This email is already registered", field="email")

        user = User(
            first_name=data.first_name,
            last_name=data.last_name,
            email=email,
            access_level=1,
            password=self.codec.hash(data.password),
            avatar=data.avatar,
            bio=data.bio,
        )
        with store_errors("creating a user"):
            db.add(user)
            await db.flush()

        logger.info("User created: %s", user.id)
        return user

    async def list_users(self, db: AsyncSession) -> List[User]:
        with store_errors("listing users"):
            result = await db.execute(select(User).order_by(User.last_name, User.first_name))
            return list(result.scalars().all())

    async def find_user(self, db: AsyncSession, user_id: UUID) -> Optional[User]:
        with store_errors("fetching a user"):
            return await db.get(User, user_id)

    async def get_user(self, db: AsyncSession, user_id: UUID) -> User:
        user = await self.find_user(db, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def update_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: UserUpdate,
        avatar_name: Optional[str] = None,
    ) -> User:
        """
        Partial update. A new password is re-hashed; a processed avatar
        upload (avatar_name) takes precedence over an avatar string field.
        """
        user = await self.get_user(db, user_id)
        changes = data.model_dump(exclude_none=True)

        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
            if changes["email"] != user.email:
                existing = await self._find_by_email(db, changes["email"])
                if existing is not None:
                    raise ConflictError(message="This email is already registered", field="email")

        if "password" in changes:
            changes["password"] = self.codec.hash(changes["password"])

        if avatar_name:
            changes["avatar"] = avatar_name

        for field, value in changes.items():
            setattr(user, field, value)

        with store_errors("updating a user"):
            await db.flush()

        logger.info("User updated: %s (fields=%s)", user.id, sorted(changes))
        return user

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> str:
        user = await self.get_user(db, user_id)
        with store_errors("deleting a user"):
            await db.delete(user)
            await db.flush()
        logger.info("User deleted: %s", user_id)
        return f"User: {user_id} deleted."

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        with store_errors("looking up a user"):
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
