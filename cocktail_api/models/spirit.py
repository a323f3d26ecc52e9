"""ORM model for the `spirits` table: the base-liquor categories cocktails are grouped by."""

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cocktail_api.database import Base, TimestampMixin


class Spirit(TimestampMixin, Base):
    """
    A base spirit (Vodka, Rum, Gin, ...).

    spirit_name is stored in canonical capitalization ("Vodka"). There is no
    case-insensitive index: callers normalize before looking a name up.
    """

    __tablename__ = "spirits"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    spirit_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Spirit(id={self.id}, spirit_name='{self.spirit_name}')>"
