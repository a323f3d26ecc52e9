"""ORM model for the `comments` table."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cocktail_api.database import Base, TimestampMixin, utcnow


class Comment(TimestampMixin, Base):
    """
    A free-text note a user left on a cocktail.

    user_name is a denormalized display name so a cocktail's comment thread
    renders without joining users. Text length is bounded by
    settings.comment_max_length (checked in CommentService).
    """

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    text: Mapped[str] = mapped_column(Text, nullable=False)
    date_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    cocktail_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("cocktails.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_name: Mapped[str] = mapped_column(String(200), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("idx_comments_cocktail_id", "cocktail_id"),
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, cocktail_id={self.cocktail_id})>"
