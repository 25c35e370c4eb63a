"""
Inkpress Backend - Upload Service Unit Tests
=============================================

What we test:
    ✅ Extension is taken from the text after the last "."
    ✅ Stored file ends up at uploads/<hex>.<ext> with the uploaded bytes
    ✅ Empty and oversized files rejected before anything is written
    ✅ Cleanup removes files and tolerates missing ones
"""

import os
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from inkpress.config import settings
from inkpress.exceptions import FileStorageError, ValidationError
from inkpress.services.upload_service import MAX_EXTENSION_LENGTH, UploadService


class TestExtension:

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("photo.png", "png"),
            ("photo.final.JPG", "JPG"),
            ("archive.tar.gz", "gz"),
            ("README", "README"),
            ("../../etc/passwd", "passwd"),
            ("C:\\Users\\me\\cover.webp", "webp"),
        ],
    )
    def test_extension_of(self, filename, expected):
        assert UploadService.extension_of(filename) == expected


class TestStore:

    @pytest.mark.asyncio
    async def test_store_writes_renamed_file(self, upload_dir, sample_image_bytes):
        service = UploadService(upload_dir=upload_dir)

        absolute_path, cover = await service.store("cover.png", sample_image_bytes)

        stored = Path(absolute_path)
        assert stored.exists()
        assert stored.read_bytes() == sample_image_bytes
        assert stored.suffix == ".png"
        assert cover == f"uploads/{stored.name}"
        # Only the renamed file remains; no extensionless temp file
        assert os.listdir(upload_dir) == [stored.name]

    @pytest.mark.asyncio
    async def test_store_generates_unique_names(self, upload_dir, sample_image_bytes):
        service = UploadService(upload_dir=upload_dir)

        _, first = await service.store("a.png", sample_image_bytes)
        _, second = await service.store("a.png", sample_image_bytes)

        assert first != second

    @pytest.mark.asyncio
    async def test_store_rejects_empty_file(self, upload_dir):
        service = UploadService(upload_dir=upload_dir)

        with pytest.raises(ValidationError) as exc_info:
            await service.store("empty.png", b"")

        assert exc_info.value.field == "file"
        assert os.listdir(upload_dir) == []

    @pytest.mark.asyncio
    async def test_store_rejects_overlong_extension(self, upload_dir, sample_image_bytes):
        service = UploadService(upload_dir=upload_dir)

        with pytest.raises(ValidationError) as exc_info:
            await service.store("a." + "x" * 300, sample_image_bytes)

        assert exc_info.value.field == "file"
        assert os.listdir(upload_dir) == []

    @pytest.mark.asyncio
    async def test_store_accepts_extension_at_limit(self, upload_dir, sample_image_bytes):
        service = UploadService(upload_dir=upload_dir)
        extension = "x" * MAX_EXTENSION_LENGTH

        _, cover = await service.store("a." + extension, sample_image_bytes)

        assert cover.endswith("." + extension)

    @pytest.mark.asyncio
    async def test_store_rejects_oversized_file(self, upload_dir):
        service = UploadService(upload_dir=upload_dir)
        too_big = b"x" * (settings.max_file_size + 1)

        with pytest.raises(ValidationError):
            await service.store("big.png", too_big)

        assert os.listdir(upload_dir) == []

    def test_reported_length_checked_first(self, upload_dir):
        service = UploadService(upload_dir=upload_dir)

        with pytest.raises(ValidationError):
            service.validate_size(10, content_length=settings.max_file_size + 1)

    @pytest.mark.asyncio
    async def test_rename_failure_cleans_temp_file(self, upload_dir, sample_image_bytes):
        service = UploadService(upload_dir=upload_dir)

        with patch(
            "inkpress.services.upload_service.aiofiles.os.rename",
            AsyncMock(side_effect=OSError("disk full")),
        ):
            with pytest.raises(FileStorageError):
                await service.store("cover.png", sample_image_bytes)

        assert os.listdir(upload_dir) == []


class TestCleanup:

    @pytest.mark.asyncio
    async def test_cleanup_removes_file(self, upload_dir, sample_image_bytes):
        service = UploadService(upload_dir=upload_dir)
        absolute_path, _ = await service.store("cover.png", sample_image_bytes)

        await service.cleanup(absolute_path)

        assert not Path(absolute_path).exists()

    @pytest.mark.asyncio
    async def test_cleanup_missing_file_is_noop(self, upload_dir):
        service = UploadService(upload_dir=upload_dir)
        await service.cleanup(os.path.join(upload_dir, "nope.png"))
