"""Spirit listing and creation."""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.database import store_errors
from cocktail_api.exceptions import ConflictError, ValidationError
from cocktail_api.models.spirit import Spirit
from cocktail_api.services.cocktail_service import normalize_spirit_name

logger = logging.getLogger(__name__)


class SpiritService:

    async def list_spirits(self, db: AsyncSession) -> List[Spirit]:
        with store_errors("listing spirits"):
            result = await db.execute(select(Spirit).order_by(Spirit.spirit_name))
            return list(result.scalars().all())

    async def create_spirit(self, db: AsyncSession, spirit_name: str) -> Spirit:
        """Store a spirit under its canonical capitalization."""
        canonical = normalize_spirit_name(spirit_name)
        if not canonical:
            raise ValidationError(message="A spirit name is required.", field="spiritName")

        with store_errors("checking the spirit name"):
            result = await db.execute(select(Spirit.id).where(Spirit.spirit_name == canonical))
            if result.first() is not None:
                raise ConflictError(message=f"Spirit '{canonical}' already exists.", field="spiritName")

        spirit = Spirit(spirit_name=canonical)
        with store_errors("creating a spirit"):
            db.add(spirit)
            await db.flush()

        logger.info("Spirit created: %s (%s)", spirit.id, canonical)
        return spirit
