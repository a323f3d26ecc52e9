"""
Cocktail Catalog Backend: Image Service Unit Tests
====================================================

What:  Intake validation, transcoding to exact-size PNG derivatives, and the
       keep/delete rules for originals. Uses real Pillow images on a
       temporary directory.

Test Strategy:
    ✅ Allowed / rejected extensions (case-insensitive)
    ✅ Empty, oversized and non-image uploads rejected before anything is written
    ✅ Stored names are generated, never the client's filename
    ✅ Derivative is PNG at exactly the requested size; original removed
    ✅ Transcode failure keeps the original and raises ImageProcessingError
    ✅ A failed delete of the original still returns the derivative
    ✅ Too many pixels, or a decompression bomb, is a ValidationError
"""

import os
import re
from unittest.mock import AsyncMock, patch

import pytest
from PIL import Image

from cocktail_api.exceptions import FileStorageError, ImageProcessingError, ValidationError
from cocktail_api.services.image_service import ImageService


class TestImageValidation:

    @pytest.fixture(autouse=True)
    def _service(self, tmp_path):
        self.service = ImageService(str(tmp_path), max_upload_size=1024)

    # ── Extension ─────────────────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["a.png", "a.jpg", "a.jpeg", "a.webp", "A.PNG", "b.JpEg"])
    def test_allowed_extensions(self, filename):
        assert self.service.validate_extension(filename) == os.path.splitext(filename)[1].lower()

    @pytest.mark.parametrize("filename", ["anim.gif", "doc.pdf", "tool.exe", "noextension", ""])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    # ── Size ──────────────────────────────────────────────────────────────

    def test_empty_upload_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(b"")

    def test_oversized_upload_rejected(self):
        with pytest.raises(ValidationError, match="too large"):
            self.service.validate_size(b"x" * 1025)

    def test_upload_at_limit_accepted(self):
        self.service.validate_size(b"x" * 1024)

    # ── Content ───────────────────────────────────────────────────────────

    def test_non_image_bytes_rejected(self):
        with pytest.raises(ValidationError, match="not a valid image"):
            self.service.validate_image_content(b"%PDF-1.4 definitely not a picture")

    def test_error_names_the_field(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_extension("x.gif", field="cocktailImage")
        assert exc_info.value.field == "cocktailImage"

    # ── Dimensions ────────────────────────────────────────────────────────

    def test_too_many_pixels_rejected(self, tmp_path, png_factory):
        service = ImageService(str(tmp_path), max_image_pixels=100 * 100)

        service.validate_image_content(png_factory(100, 100))
        with pytest.raises(ValidationError, match="too large") as exc_info:
            service.validate_image_content(png_factory(101, 100), field="cocktailImage")
        assert exc_info.value.field == "cocktailImage"
        assert exc_info.value.context["max_pixels"] == 10_000

    def test_decompression_bomb_rejected(self, png_factory):
        # Pillow refuses to open anything above twice MAX_IMAGE_PIXELS
        with patch.object(Image, "MAX_IMAGE_PIXELS", 1000):
            with pytest.raises(ValidationError, match="too large"):
                self.service.validate_image_content(png_factory(100, 100))


class TestImageIntake:

    @pytest.mark.asyncio
    async def test_intake_writes_generated_name(self, image_service, png_bytes):
        stored = await image_service.intake("../../evil name.PNG", png_bytes)

        assert re.fullmatch(r"[0-9a-f]{32}\.png", stored)
        assert (image_service.storage_root / stored).read_bytes() == png_bytes

    @pytest.mark.asyncio
    async def test_intake_rejects_before_writing(self, image_service):
        with pytest.raises(ValidationError):
            await image_service.intake("fake.png", b"not an image")
        assert [p for p in image_service.storage_root.iterdir() if p.is_file()] == []

    @pytest.mark.asyncio
    async def test_intake_rejects_oversized_dimensions(self, tmp_path, png_factory):
        service = ImageService(str(tmp_path), max_image_pixels=64 * 64)

        with pytest.raises(ValidationError):
            await service.intake("huge.png", png_factory(200, 200))
        assert [p for p in service.storage_root.iterdir() if p.is_file()] == []

    @pytest.mark.asyncio
    async def test_intake_write_failure_is_file_storage_error(self, image_service, png_bytes):
        with patch("cocktail_api.services.image_service.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError):
                await image_service.intake("photo.png", png_bytes)


class TestImageTranscode:

    @pytest.mark.asyncio
    async def test_derivative_has_exact_size_and_original_is_removed(self, image_service, png_bytes):
        stored = await image_service.intake("photo.png", png_bytes)

        derived = await image_service.transcode(stored, 400, 400)

        assert derived == stored
        assert not (image_service.storage_root / stored).exists()
        with Image.open(image_service.processed_root / derived) as img:
            assert img.format == "PNG"
            assert img.size == (400, 400)

    @pytest.mark.asyncio
    async def test_jpeg_original_becomes_png_derivative(self, image_service, tmp_path):
        jpeg_path = tmp_path / "source.jpg"
        Image.new("RGB", (300, 900), (10, 120, 200)).save(jpeg_path, format="JPEG")

        derived = await image_service.process_upload("source.jpg", jpeg_path.read_bytes(), 1600, 600)

        assert derived.endswith(".png")
        with Image.open(image_service.processed_root / derived) as img:
            assert img.size == (1600, 600)

    @pytest.mark.asyncio
    async def test_failure_keeps_original(self, image_service, png_bytes):
        stored = await image_service.intake("photo.png", png_bytes)
        # Corrupt the original after intake so Pillow cannot decode it
        (image_service.storage_root / stored).write_bytes(b"corrupted")

        with pytest.raises(ImageProcessingError):
            await image_service.transcode(stored, 400, 400)

        assert (image_service.storage_root / stored).exists()
        assert list(image_service.processed_root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_failed_delete_still_returns_derivative(self, image_service, png_bytes):
        stored = await image_service.intake("photo.png", png_bytes)

        with patch("aiofiles.os.remove", AsyncMock(side_effect=OSError("busy"))):
            derived = await image_service.transcode(stored, 64, 64)

        assert (image_service.processed_root / derived).exists()
        assert (image_service.storage_root / stored).exists()

    @pytest.mark.asyncio
    async def test_discard_removes_derivative(self, image_service, png_bytes):
        derived = await image_service.process_upload("photo.png", png_bytes, 64, 64)

        await image_service.discard(derived)

        assert not (image_service.processed_root / derived).exists()

    @pytest.mark.asyncio
    async def test_discard_ignores_missing_and_none(self, image_service):
        await image_service.discard(None)
        await image_service.discard("never-existed.png")

    def test_storage_is_writable(self, image_service):
        assert image_service.is_writable() is True
