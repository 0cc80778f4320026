"""
Unit tests for local upload storage.
"""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import aiofiles
import pytest

from erp.core.storage import LocalFileStorage, read_upload, sanitize_filename


def test_sanitize_filename():
    assert sanitize_filename("My Passport (1).PDF") == "my_passport__1_.pdf"


class TestLocalFileStorage:
    @pytest.mark.asyncio
    async def test_save_writes_under_owner(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))

        stored = await storage.save("student-1", "ITR 2024.pdf", b"%PDF-1.4")

        path = Path(stored.stored_path)
        assert path.parent == tmp_path / "student-1"
        assert path.suffix == ".pdf"
        assert path.read_bytes() == b"%PDF-1.4"
        assert stored.file_name == "ITR 2024.pdf"
        assert stored.file_size == 8

    @pytest.mark.asyncio
    async def test_same_name_gets_unique_paths(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))

        first = await storage.save("student-1", "a.png", b"1")
        second = await storage.save("student-1", "a.png", b"2")

        assert first.stored_path != second.stored_path

    @pytest.mark.asyncio
    async def test_delete_removes_file(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        stored = await storage.save("student-1", "a.png", b"1")

        await storage.delete(stored.stored_path)

        assert not Path(stored.stored_path).exists()

    @pytest.mark.asyncio
    async def test_delete_missing_file_is_ignored(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        await storage.delete(str(tmp_path / "missing.pdf"))

    @pytest.mark.asyncio
    async def test_read_returns_content(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        stored = await storage.save("resources", "deck.pdf", b"%PDF-slides")

        assert await storage.read(stored.stored_path) == b"%PDF-slides"

    @pytest.mark.asyncio
    async def test_save_writes_through_aiofiles(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))

        with patch("erp.core.storage.aiofiles.open", wraps=aiofiles.open) as mock_open:
            await storage.save("student-1", "a.pdf", b"x")

        mock_open.assert_called_once()


class TestReadUpload:
    @pytest.mark.asyncio
    async def test_reads_at_most_one_byte_past_limit(self):
        upload = AsyncMock()
        upload.read = AsyncMock(return_value=b"x" * 11)

        content = await read_upload(upload, max_size=10)

        upload.read.assert_awaited_once_with(11)
        assert len(content) == 11

    @pytest.mark.asyncio
    async def test_small_file_read_whole(self):
        upload = AsyncMock()
        upload.read = AsyncMock(return_value=b"%PDF")

        assert await read_upload(upload, max_size=10) == b"%PDF"
