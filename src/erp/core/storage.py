"""
Upload Storage

Stores uploaded files on the local filesystem under
<upload_dir>/<owner>/<uuid><ext>.
"""

import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os
from fastapi import Request, UploadFile

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    """Result of saving an upload."""

    stored_path: str
    file_name: str
    file_size: int


def sanitize_filename(filename: str) -> str:
    """Replace anything but letters, digits, dot, underscore and hyphen; lowercase."""
    return re.sub(r"[^a-z0-9._-]", "_", filename, flags=re.IGNORECASE).lower()


class LocalFileStorage:
    """
    Filesystem storage for uploads.

    Args:
        upload_dir: Root directory for uploaded files
    """

    def __init__(self, upload_dir: str):
        self.root = Path(upload_dir)

    async def save(self, owner_id: str, file_name: str, content: bytes) -> StoredFile:
        """
        Save file content under the owner's directory with a unique name.

        Args:
            owner_id: Directory name (a student ID, or "resources")
            file_name: Original file name (only its extension is kept on disk)
            content: File bytes

        Returns:
            StoredFile with the stored path and original name
        """
        directory = self.root / owner_id
        await aiofiles.os.makedirs(directory, exist_ok=True)

        extension = Path(sanitize_filename(file_name)).suffix
        path = directory / f"{uuid.uuid4()}{extension}"
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

        logger.info(f"Stored upload for {owner_id}: {path.name} ({len(content)} bytes)")
        return StoredFile(stored_path=str(path), file_name=file_name, file_size=len(content))

    async def read(self, stored_path: str) -> bytes:
        """
        Read a stored file.

        Raises:
            FileNotFoundError: If the file is gone
        """
        async with aiofiles.open(stored_path, "rb") as f:
            return await f.read()

    async def delete(self, stored_path: str) -> None:
        """Delete a stored file. A missing file is logged, not raised."""
        try:
            await aiofiles.os.remove(stored_path)
        except FileNotFoundError:
            logger.warning(f"File already removed: {stored_path}")
        except OSError as e:
            logger.error(f"Failed to delete file {stored_path}: {e}")


async def read_upload(upload: UploadFile, max_size: int) -> bytes:
    """
    Read an upload, stopping one byte past max_size.

    An oversized file comes back max_size + 1 bytes long, which size
    validation rejects, without the rest of the body being read.
    """
    return await upload.read(max_size + 1)


def get_storage(request: Request) -> LocalFileStorage:
    """FastAPI dependency returning the application's upload storage."""
    return request.app.state.storage
