"""
Cocktail Catalog Backend: Comment Service
===========================================

What:  List, add and delete comments on cocktails.
Rules: text is required (non-blank) and at most max_length characters;
       the referenced cocktail and user must exist.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.database import store_errors
from cocktail_api.exceptions import NotFoundError, ValidationError
from cocktail_api.models.cocktail import Cocktail
from cocktail_api.models.comment import Comment
from cocktail_api.models.user import User
from cocktail_api.schemas.comment import CommentCreate

logger = logging.getLogger(__name__)


class CommentService:

    def __init__(self, max_length: int = 1000):
        self.max_length = max_length

    async def list_comments(self, db: AsyncSession) -> List[Comment]:
        with store_errors("listing comments"):
            result = await db.execute(select(Comment).order_by(Comment.date_time.desc()))
            return list(result.scalars().all())

    async def list_for_cocktail(self, db: AsyncSession, cocktail_id: UUID) -> List[Comment]:
        with store_errors("listing comments for a cocktail"):
            result = await db.execute(
                select(Comment)
                .where(Comment.cocktail_id == cocktail_id)
                .order_by(Comment.date_time.desc())
            )
            return list(result.scalars().all())

    async def add_comment(self, db: AsyncSession, data: CommentCreate) -> Comment:
        """
        Raises:
            ValidationError: text empty or too long, or a reference missing
            NotFoundError: the cocktail or the user does not exist
        """
        text = (data.text or "").strip()
        if not text:
            raise ValidationError(message="Please enter a comment.", field="text")
        if len(text) > self.max_length:
            raise ValidationError(
                message=f"Comment must be at most {self.max_length} characters.",
                field="text",
                context={"max_length": self.max_length, "length": len(text)},
            )
        for field, alias in (("cocktail_id", "cocktailId"), ("user_id", "userId"), ("user_name", "userName")):
            if not getattr(data, field):
                raise ValidationError(message=f"Missing required field: {alias}", field=alias)

        with store_errors("checking the cocktail"):
            cocktail = await db.get(Cocktail, data.cocktail_id)
        if cocktail is None:
            raise NotFoundError(resource="cocktail", resource_id=str(data.cocktail_id))

        with store_errors("checking the user"):
            author = await db.get(User, data.user_id)
        if author is None:
            raise NotFoundError(resource="user", resource_id=str(data.user_id))

        comment = Comment(
            text=text,
            cocktail_id=data.cocktail_id,
            user_id=data.user_id,
            user_name=data.user_name,
            avatar=data.avatar,
        )
        with store_errors("adding a comment"):
            db.add(comment)
            await db.flush()

        logger.info("Comment %s added to cocktail %s", comment.id, comment.cocktail_id)
        return comment

    async def delete_comment(self, db: AsyncSession, comment_id: UUID) -> Comment:
        with store_errors("fetching a comment"):
            comment = await db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError(resource="comment", resource_id=str(comment_id))

        with store_errors("deleting a comment"):
            await db.delete(comment)
            await db.flush()
        logger.info("Comment deleted: %s", comment_id)
        return comment
