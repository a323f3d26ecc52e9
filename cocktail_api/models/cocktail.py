"""
Cocktail Catalog Backend: Cocktail SQLAlchemy Model
=====================================================

What:  ORM model for the `cocktails` table.

Table Design Rationale:
    - cocktail_name UNIQUE: CocktailService checks for an existing name
      before inserting, but two concurrent creates can both pass that check.
      The constraint makes the second insert fail (IntegrityError), which
      the service reports as a conflict.
    - spirit_name + spirit_id: the name is denormalized for display and
      filtering; spirit_id is the real reference.
    - ingredients: JSON list of free-form strings ("2 cl lime juice").
    - cocktail_image / cocktail_header_image: filenames of processed
      derivatives under <storage_root>/processed. The bytes live on disk.

Lifecycle:
    1. Created by CocktailService.create_cocktail after spirit resolution
       and the name check
    2. Updated in place; new uploads replace image filenames, otherwise the
       caller-supplied or stored values are kept
    3. Deleted by id (comments cascade)
"""

import uuid
from typing import List, Optional

from sqlalchemy import JSON, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cocktail_api.database import Base, TimestampMixin


class Cocktail(TimestampMixin, Base):
    """A cocktail recipe."""

    __tablename__ = "cocktails"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    cocktail_name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)

    spirit_name: Mapped[str] = mapped_column(String(100), nullable=False)
    spirit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("spirits.id", ondelete="RESTRICT"),
        nullable=False,
    )

    preparation: Mapped[str] = mapped_column(Text, nullable=False)
    ingredients: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    story: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tips: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    cocktail_image: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cocktail_header_image: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Listing by spirit is the main browse path of the front end
    __table_args__ = (
        Index("idx_cocktails_spirit_id", "spirit_id"),
    )

    def __repr__(self) -> str:
        return f"<Cocktail(id={self.id}, cocktail_name='{self.cocktail_name}')>"
