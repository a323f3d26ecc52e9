"""Spirit schemas."""

import uuid
from datetime import datetime

from pydantic import Field

from cocktail_api.schemas.common import CamelModel


class SpiritCreate(CamelModel):
    spirit_name: str = Field(min_length=1, max_length=100)


class SpiritResponse(CamelModel):
    id: uuid.UUID
    spirit_name: str
    created_at: datetime
    updated_at: datetime
