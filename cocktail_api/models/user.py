"""
Cocktail Catalog Backend: User SQLAlchemy Model
=================================================

What:  ORM model for the `users` table.
How:   `password` holds a Credential Digest (`salt$hash`) produced by
       CredentialCodec; the plaintext is never persisted.

Table Design Rationale:
    - email UNIQUE: email is the sign-in identifier; the constraint makes
      duplicate registration impossible even under concurrent requests
    - access_level: integer role; settings.admin_access_level and above
      may moderate comments and manage spirits
    - new_user: lets the front end show onboarding once
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from cocktail_api.database import Base, TimestampMixin


class User(TimestampMixin, Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    access_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Credential Digest, never the plaintext
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    avatar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    new_user: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', access_level={self.access_level})>"
