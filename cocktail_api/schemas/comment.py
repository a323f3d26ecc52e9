"""Comment schemas."""

import uuid
from datetime import datetime
from typing import Optional

from cocktail_api.schemas.common import CamelModel


class CommentCreate(CamelModel):
    """
    Body of POST /comment.

    Fields are optional here so that a missing one is reported by
    CommentService with a specific message rather than a generic schema error.
    """
    text: Optional[str] = None
    cocktail_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    user_name: Optional[str] = None
    avatar: Optional[str] = None


class CommentResponse(CamelModel):
    id: uuid.UUID
    text: str
    date_time: datetime
    cocktail_id: uuid.UUID
    user_id: uuid.UUID
    user_name: str
    avatar: Optional[str] = None
    created_at: datetime
    updated_at: datetime
