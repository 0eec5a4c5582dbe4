"""
Filesystem storage for uploaded spreadsheet bytes.

Layout: ``<root>/<owner_id>/<filename>``. Blocking file calls run in a
worker thread so request handling stays on the event loop.
"""

import asyncio
import os
import uuid
from pathlib import Path

from app.config import settings
from app.utils.logger import setup_logger

logger = setup_logger("file_storage")

STAGING_SUFFIX = ".uploading"


def safe_filename(filename: str | None) -> str:
    """Strip client-supplied directories; an empty result means no usable name."""
    if not filename:
        return ""
    name = Path(filename.replace("\\", "/")).name
    return "" if name in {".", ".."} else name.strip()


class FileStorage:
    def __init__(self, root: str | os.PathLike | None = None):
        self.root = Path(root if root is not None else settings.upload_dir)

    def owner_dir(self, owner_id: uuid.UUID) -> Path:
        return self.root / str(owner_id)

    def path_for(self, owner_id: uuid.UUID, filename: str) -> Path:
        return self.owner_dir(owner_id) / safe_filename(filename)

    async def ensure_owner_dir(self, owner_id: uuid.UUID) -> Path:
        directory = self.owner_dir(owner_id)
        await asyncio.to_thread(directory.mkdir, parents=True, exist_ok=True)
        return directory

    async def write_staged(self, path: Path, raw: bytes) -> Path:
        """
        Write ``raw`` to a staging file next to ``path``, unique to this call.

        ``commit_staged`` moves it into place.
        """
        staging_path = path.with_name(f"{path.name}.{uuid.uuid4().hex}{STAGING_SUFFIX}")
        await asyncio.to_thread(staging_path.write_bytes, raw)
        logger.debug(f"Staged {len(raw)} bytes at {staging_path}")
        return staging_path

    async def commit_staged(self, staging_path: Path, path: Path) -> None:
        await asyncio.to_thread(os.replace, staging_path, path)
        logger.debug(f"Moved {staging_path} to {path}")

    async def discard(self, path: Path) -> None:
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            pass

    async def read(self, path: str | os.PathLike) -> bytes:
        return await asyncio.to_thread(Path(path).read_bytes)

    async def delete(self, path: str | os.PathLike | None) -> bool:
        """
        Remove stored bytes. A file that is already gone is not an error.

        Returns True if a file was removed.
        """
        if not path:
            return False
        try:
            await asyncio.to_thread(Path(path).unlink)
            logger.info(f"Deleted file from filesystem: {path}")
            return True
        except FileNotFoundError:
            logger.warning(f"File not found on disk, skipping deletion: {path}")
            return False
