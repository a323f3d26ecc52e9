"""
Cocktail Catalog Backend: Image Service (Intake + Transcode)
==============================================================

What:  Accepts uploaded cocktail artwork, stores it under a generated name,
       and turns it into a fixed-size PNG derivative.
Why:   Only derivatives are ever referenced by cocktail records; originals
       are transient and removed as soon as a derivative exists.
How:   Pillow for validation and resizing (in a worker thread), aiofiles for
       non-blocking writes.
Who:   CocktailService (icon + header images), UserService (avatars).

Pipeline:
    ┌──────────────┐    ┌─────────────────┐    ┌──────────────────────┐
    │ intake()     │───▶│ transcode()     │───▶│ filename persisted   │
    │ validate +   │    │ fit, PNG encode │    │ by the caller        │
    │ write <uuid> │    │ delete original │    └──────────────────────┘
    └──────────────┘    └─────────────────┘

    intake fails     → nothing on disk, no name returned
    transcode fails  → ImageProcessingError, original kept for inspection
    delete fails     → logged; the derivative is still returned

Directory Structure:
    <storage_root>/
    ├── 3f2a...e1.jpg            (original, only while processing)
    └── processed/
        └── 3f2a...e1.png        (derivative, referenced by records)
"""

import asyncio
import io
import logging
import os
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os
from PIL import Image, ImageOps, UnidentifiedImageError

from cocktail_api.exceptions import FileStorageError, ImageProcessingError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}

# Derivative encoding policy
OUTPUT_FORMAT = "PNG"
OUTPUT_EXTENSION = ".png"
PNG_COMPRESS_LEVEL = 9


class ImageService:
    """
    Manages the lifecycle of uploaded images on local disk.

    Constructed once in create_app() with the configured storage root;
    tests construct their own instance on a temporary directory.
    """

    def __init__(
        self,
        storage_root: str,
        processed_dir: str = "processed",
        max_upload_size: int = 10_485_760,
        max_image_pixels: int = 40_000_000,
    ):
        self.storage_root = Path(storage_root).resolve()
        self.processed_root = self.storage_root / processed_dir
        self.max_upload_size = max_upload_size
        self.max_image_pixels = max_image_pixels
        self.processed_root.mkdir(parents=True, exist_ok=True)
        logger.info("ImageService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str, field: str = "file") -> str:
        """Return the normalized extension, or raise ValidationError."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or 'none'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field=field,
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content: bytes, field: str = "file") -> None:
        if not content:
            raise ValidationError(message="The uploaded file is empty.", field=field)

        if len(content) > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            raise ValidationError(
                message=f"File is too large ({len(content) / (1024 * 1024):.1f}MB). Maximum is {max_mb:.0f}MB.",
                field=field,
                context={"max_size_mb": max_mb, "actual_size": len(content)},
            )

    def validate_dimensions(self, size: Tuple[int, int], field: str = "file") -> None:
        """Reject images whose decoded pixel count exceeds max_image_pixels."""
        width, height = size
        if width * height > self.max_image_pixels:
            raise ValidationError(
                message=f"Image dimensions {width}x{height} are too large.",
                field=field,
                context={"width": width, "height": height, "max_pixels": self.max_image_pixels},
            )

    def validate_image_content(self, content: bytes, field: str = "file") -> None:
        """
        Reject bytes Pillow cannot identify as an image (e.g. a renamed PDF)
        and images with too many pixels. Blocking; intake() runs it in a
        worker thread.
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                self.validate_dimensions(img.size, field)
                img.verify()
        except Image.DecompressionBombError as e:
            raise ValidationError(
                message="Image dimensions are too large.",
                field=field,
                context={"max_pixels": self.max_image_pixels},
            ) from e
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(
                message="The uploaded file is not a valid image.",
                field=field,
                context={"error_type": type(e).__name__},
            ) from e

    # ── Intake ────────────────────────────────────────────────────────────

    async def intake(self, filename: str, content: bytes, field: str = "file") -> str:
        """
        Validate an upload and write it under a generated unique name.

        Returns:
            The stored name ("<uuid hex><ext>"), relative to storage_root.

        Raises:
            ValidationError: bad extension, empty/oversized, not an image,
                too many pixels
            FileStorageError: the write failed (nothing is referenced)
        """
        ext = self.validate_extension(filename, field)
        self.validate_size(content, field)
        await asyncio.to_thread(self.validate_image_content, content, field)

        stored_name = f"{uuid.uuid4().hex}{ext}"
        path = self.storage_root / stored_name

        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, str(e))
            await self._remove_quietly(path)
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.info("Upload stored: %s (%d bytes)", stored_name, len(content))
        return stored_name

    # ── Transcode ─────────────────────────────────────────────────────────

    def _render(self, source: Path, target: Path, width: int, height: int) -> None:
        """Blocking Pillow work; runs in a worker thread."""
        with Image.open(source) as img:
            self.validate_dimensions(img.size)
            img = ImageOps.exif_transpose(img)
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA")
            # Cover the box exactly, cropping the overflow around the centre
            fitted = ImageOps.fit(img, (width, height), method=Image.Resampling.LANCZOS)
            fitted.save(target, format=OUTPUT_FORMAT, optimize=True, compress_level=PNG_COMPRESS_LEVEL)

    async def transcode(self, stored_name: str, width: int, height: int) -> str:
        """
        Produce the derivative for a stored original, then delete the original.

        Returns:
            The derivative filename (same base name, .png), relative to the
            processed directory.

        Raises:
            ImageProcessingError: the original could not be read or the
            derivative could not be written. The original is NOT deleted.
            ValidationError: the original has more pixels than allowed.
        """
        source = self.storage_root / stored_name
        derived_name = f"{Path(stored_name).stem}{OUTPUT_EXTENSION}"
        target = self.processed_root / derived_name

        try:
            await asyncio.to_thread(self._render, source, target, width, height)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error("Transcode failed for %s: %s", stored_name, str(e))
            await self._remove_quietly(target)
            raise ImageProcessingError(
                context={"stored_name": stored_name, "error_type": type(e).__name__},
            ) from e
        except Image.DecompressionBombError as e:
            raise ValidationError(
                message="Image dimensions are too large.",
                context={"stored_name": stored_name, "max_pixels": self.max_image_pixels},
            ) from e

        logger.info("Derivative written: %s (%dx%d)", derived_name, width, height)

        # Derivative confirmed; the original is no longer needed
        try:
            await aiofiles.os.remove(source)
        except OSError as e:
            logger.warning("Could not delete original %s after transcode: %s", stored_name, str(e))

        return derived_name

    async def process_upload(self, filename: str, content: bytes, width: int, height: int, field: str = "file") -> str:
        """Intake then transcode. Returns the derivative filename."""
        stored_name = await self.intake(filename, content, field)
        return await self.transcode(stored_name, width, height)

    # ── Cleanup ───────────────────────────────────────────────────────────

    async def discard(self, derived_name: Optional[str]) -> None:
        """
        Remove a derivative whose record was never written.

        Best-effort: failures are logged, never raised.
        """
        if derived_name:
            await self._remove_quietly(self.processed_root / derived_name)

    async def _remove_quietly(self, path: Path) -> None:
        try:
            if await aiofiles.os.path.exists(path):
                await aiofiles.os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", path, str(e))

    def is_writable(self) -> bool:
        """Used by the health check."""
        return os.access(self.storage_root, os.W_OK) and os.access(self.processed_root, os.W_OK)
