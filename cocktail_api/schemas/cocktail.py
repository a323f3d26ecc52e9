"""
Cocktail Catalog Backend: Cocktail Schemas
============================================

What:  CocktailInput carries the text fields of a create/update request
       (they arrive as multipart form fields alongside the image files);
       CocktailResponse is what every cocktail endpoint returns.

Why every CocktailInput field is optional:
    The same shape serves create and partial update. CocktailService
    enforces the fields a create requires and reports the missing ones
    together as a single ValidationError.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from cocktail_api.schemas.common import CamelModel


class CocktailInput(CamelModel):
    cocktail_name: Optional[str] = None
    spirit_name: Optional[str] = None
    preparation: Optional[str] = None
    ingredients: Optional[List[str]] = None
    story: Optional[str] = None
    tips: Optional[str] = None
    # Existing derivative filenames, sent back unchanged when no new file is uploaded
    cocktail_image: Optional[str] = None
    cocktail_header_image: Optional[str] = None

    def provided_fields(self) -> dict:
        """Fields the caller actually sent (None means 'not supplied')."""
        return self.model_dump(exclude_none=True)


class CocktailResponse(CamelModel):
    id: uuid.UUID
    cocktail_name: str
    spirit_name: str
    spirit_id: uuid.UUID
    preparation: str
    ingredients: List[str] = Field(default_factory=list)
    story: Optional[str] = None
    tips: Optional[str] = None
    cocktail_image: Optional[str] = None
    cocktail_header_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime
