"""
Cocktail Catalog Backend: Cocktail Service (Persistence Orchestrator)
=======================================================================

What:  Coordinates spirit resolution, name-collision checks, image
       processing and the cocktail write for every cocktail operation.
How:   Each step is its own method and fails with a typed exception, so the
       create/update sequence reads top to bottom.
Who:   Called by the /cocktail route handlers.

Create:
    ┌──────────────┐   ┌───────────────┐   ┌──────────────┐   ┌──────────┐
    │ resolve      │──▶│ name          │──▶│ process      │──▶│ insert   │
    │ spirit (404) │   │ available(409)│   │ images       │   │ (409 on  │
    └──────────────┘   └───────────────┘   └──────────────┘   │ race)    │
                                                              └──────────┘
    Nothing is written and no image is processed before the spirit and
    the name have been checked.

Concurrency:
    The name check and the insert are separate statements. Two concurrent
    creates with the same name can both pass the check; the unique
    constraint on cocktails.cocktail_name then rejects the second insert,
    which is reported as ConflictError. Derivatives produced for a write
    that did not happen are discarded.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cocktail_api.database import store_errors
from cocktail_api.exceptions import ConflictError, NotFoundError, ValidationError
from cocktail_api.models.cocktail import Cocktail
from cocktail_api.models.spirit import Spirit
from cocktail_api.schemas.cocktail import CocktailInput
from cocktail_api.services.image_service import ImageService

logger = logging.getLogger(__name__)

REQUIRED_ON_CREATE = ("cocktail_name", "spirit_name", "preparation", "ingredients")


@dataclass
class ImageUpload:
    """An uploaded file read into memory by the route."""
    filename: str
    content: bytes


def normalize_spirit_name(name: str) -> str:
    """'vodka', 'VODKA', ' Vodka ' → 'Vodka' (the stored capitalization)."""
    return name.strip().capitalize()


def clean_ingredients(ingredients: Optional[Sequence[str]]) -> List[str]:
    """Drop blank and whitespace-only entries; keep the rest as sent."""
    return [item for item in (ingredients or []) if item and item.strip()]


class CocktailService:
    """
    Business logic for cocktails.

    Holds no per-request state; the db session is passed to every call.
    """

    def __init__(
        self,
        image_service: ImageService,
        icon_size: Tuple[int, int] = (400, 400),
        header_size: Tuple[int, int] = (1600, 600),
    ):
        self.images = image_service
        self.icon_size = icon_size
        self.header_size = header_size

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_cocktails(self, db: AsyncSession) -> List[Cocktail]:
        with store_errors("listing cocktails"):
            result = await db.execute(select(Cocktail).order_by(Cocktail.cocktail_name))
            return list(result.scalars().all())

    async def list_by_spirit(self, db: AsyncSession, spirit_name: str) -> List[Cocktail]:
        """
        All cocktails made with a spirit.

        Raises:
            NotFoundError: unknown spirit, or a known spirit with no cocktails
        """
        spirit = await self._resolve_spirit(db, spirit_name)
        with store_errors("listing cocktails by spirit"):
            result = await db.execute(
                select(Cocktail)
                .where(Cocktail.spirit_id == spirit.id)
                .order_by(Cocktail.cocktail_name)
            )
            cocktails = list(result.scalars().all())

        if not cocktails:
            raise NotFoundError(
                resource="cocktail",
                message=f"No cocktails found for spirit '{spirit.spirit_name}'",
            )
        return cocktails

    async def get_cocktail(self, db: AsyncSession, cocktail_id: UUID) -> Cocktail:
        with store_errors("fetching a cocktail"):
            cocktail = await db.get(Cocktail, cocktail_id)
        if cocktail is None:
            raise NotFoundError(resource="cocktail", resource_id=str(cocktail_id))
        return cocktail

    # ── Create ────────────────────────────────────────────────────────────

    async def create_cocktail(
        self,
        db: AsyncSession,
        data: CocktailInput,
        icon: Optional[ImageUpload] = None,
        header: Optional[ImageUpload] = None,
    ) -> Cocktail:
        """
        Create a cocktail.

        Raises:
            ValidationError: required fields missing
            NotFoundError: no spirit matches spirit_name
            ConflictError: the name is taken
            FileStorageError / ValidationError: an image could not be accepted
        """
        self._require_fields(data)

        spirit = await self._resolve_spirit(db, data.spirit_name)
        await self._ensure_name_available(db, data.cocktail_name)

        icon_name, header_name = await self._process_images(icon, header)

        cocktail = Cocktail(
            cocktail_name=data.cocktail_name.strip(),
            spirit_name=spirit.spirit_name,
            spirit_id=spirit.id,
            preparation=data.preparation,
            ingredients=clean_ingredients(data.ingredients),
            story=data.story,
            tips=data.tips,
            cocktail_image=icon_name or data.cocktail_image,
            cocktail_header_image=header_name or data.cocktail_header_image,
        )

        try:
            with store_errors("creating a cocktail"):
                db.add(cocktail)
                await db.flush()
        except ConflictError as e:
            # Raced past _ensure_name_available
            await self._discard(icon_name, header_name)
            raise ConflictError(
                message=f"A cocktail named '{cocktail.cocktail_name}' already exists.",
                field="cocktailName",
            ) from e
        except Exception:
            await self._discard(icon_name, header_name)
            raise

        logger.info("Cocktail created: %s (%s)", cocktail.id, cocktail.cocktail_name)
        return cocktail

    # ── Update ────────────────────────────────────────────────────────────

    async def update_cocktail(
        self,
        db: AsyncSession,
        cocktail_id: UUID,
        data: CocktailInput,
        icon: Optional[ImageUpload] = None,
        header: Optional[ImageUpload] = None,
    ) -> Cocktail:
        """
        Partially update a cocktail and return the post-update record.

        Image fields:
            new file uploaded      → replaced by the new derivative filename
            string value supplied  → set to that value
            neither                → left unchanged
        """
        cocktail = await self.get_cocktail(db, cocktail_id)
        changes = data.provided_fields()

        if "spirit_name" in changes:
            spirit = await self._resolve_spirit(db, data.spirit_name)
            changes["spirit_name"] = spirit.spirit_name
            changes["spirit_id"] = spirit.id

        if "cocktail_name" in changes:
            changes["cocktail_name"] = changes["cocktail_name"].strip()
            if not changes["cocktail_name"]:
                raise ValidationError(message="Cocktail name cannot be empty.", field="cocktailName")
            if changes["cocktail_name"] != cocktail.cocktail_name:
                await self._ensure_name_available(db, changes["cocktail_name"], exclude_id=cocktail.id)

        if "ingredients" in changes:
            changes["ingredients"] = clean_ingredients(changes["ingredients"])

        icon_name, header_name = await self._process_images(icon, header)
        if icon_name:
            changes["cocktail_image"] = icon_name
        if header_name:
            changes["cocktail_header_image"] = header_name

        for field, value in changes.items():
            setattr(cocktail, field, value)

        try:
            with store_errors("updating a cocktail"):
                await db.flush()
        except ConflictError as e:
            await self._discard(icon_name, header_name)
            raise ConflictError(
                message=f"A cocktail named '{cocktail.cocktail_name}' already exists.",
                field="cocktailName",
            ) from e
        except Exception:
            await self._discard(icon_name, header_name)
            raise

        logger.info("Cocktail updated: %s (fields=%s)", cocktail.id, sorted(changes))
        return cocktail

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_cocktail(self, db: AsyncSession, cocktail_id: UUID) -> str:
        cocktail = await self.get_cocktail(db, cocktail_id)
        with store_errors("deleting a cocktail"):
            await db.delete(cocktail)
            await db.flush()
        logger.info("Cocktail deleted: %s", cocktail_id)
        return f"Cocktail: {cocktail_id} deleted."

    # ── Steps ─────────────────────────────────────────────────────────────

    def _require_fields(self, data: CocktailInput) -> None:
        missing = []
        for field in REQUIRED_ON_CREATE:
            value = getattr(data, field)
            if field == "ingredients":
                value = clean_ingredients(value)
            elif isinstance(value, str):
                value = value.strip()
            if not value:
                missing.append(field)
        if missing:
            raise ValidationError(
                message=f"Missing required cocktail fields: {', '.join(missing)}",
                context={"missing": missing},
            )

    async def _resolve_spirit(self, db: AsyncSession, spirit_name: Optional[str]) -> Spirit:
        canonical = normalize_spirit_name(spirit_name or "")
        if not canonical:
            raise ValidationError(message="A spirit name is required.", field="spiritName")

        with store_errors("looking up a spirit"):
            result = await db.execute(select(Spirit).where(Spirit.spirit_name == canonical))
            spirit = result.scalar_one_or_none()

        if spirit is None:
            raise NotFoundError(
                resource="spirit",
                message=f"No matching spirit found for '{canonical}'",
                context={"spirit_name": canonical},
            )
        return spirit

    async def _ensure_name_available(
        self,
        db: AsyncSession,
        cocktail_name: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        name = cocktail_name.strip()
        query = select(Cocktail.id).where(Cocktail.cocktail_name == name)
        if exclude_id is not None:
            query = query.where(Cocktail.id != exclude_id)

        with store_errors("checking the cocktail name"):
            result = await db.execute(query)
            existing = result.first()

        if existing is not None:
            raise ConflictError(
                message=f"A cocktail named '{name}' already exists.",
                field="cocktailName",
            )

    async def _process_images(
        self,
        icon: Optional[ImageUpload],
        header: Optional[ImageUpload],
    ) -> Tuple[Optional[str], Optional[str]]:
        icon_name = header_name = None
        if icon is not None:
            icon_name = await self.images.process_upload(
                icon.filename, icon.content,
                *self.icon_size,
                field="cocktailImage",
            )
        if header is not None:
            try:
                header_name = await self.images.process_upload(
                    header.filename, header.content,
                    *self.header_size,
                    field="cocktailHeaderImage",
                )
            except Exception:
                await self._discard(icon_name)
                raise
        return icon_name, header_name

    async def _discard(self, *derived_names: Optional[str]) -> None:
        for name in derived_names:
            await self.images.discard(name)
