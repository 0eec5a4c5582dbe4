"""
Upload pipeline: persist an uploaded spreadsheet, decode its first sheet and
upsert the metadata record, reporting progress to the uploader's room.

Steps and progress:
    5   start
    15  per-user directory ensured
    40  raw bytes written (staged next to the final path)
    60  decoding
    80  decoded
    95  metadata upserted (the staged bytes replace the old ones here)
    100 done

On any failure a ``processing_error`` event with progress 0 is emitted, the
staged bytes are removed and ``UploadFailedError`` is raised. The previous
record and the previous bytes for the same filename stay untouched.
"""

import asyncio
import uuid
import weakref
from datetime import UTC, datetime
from pathlib import Path

from app.db_handlers.uploaded_file import UploadedFileDBHandler
from app.models import UploadedFile
from app.services.errors import (
    InvalidOperationError,
    ServiceUnavailableError,
    UploadFailedError,
)
from app.services.file_storage import FileStorage, safe_filename
from app.services.process_callback import ProgressReporter
from app.services.realtime import FILE_PROCESSING_PROGRESS, RealtimeHub
from app.services.spreadsheet_codec import decode_rows
from app.utils.logger import setup_logger

logger = setup_logger("upload_service")

# One lock per stored path so the record and the bytes on disk always switch
# over together when uploads of the same file overlap.
_commit_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


def _commit_lock(path: Path) -> asyncio.Lock:
    key = str(path)
    lock = _commit_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _commit_locks[key] = lock
    return lock


class UploadPipeline:
    def __init__(
        self,
        hub: RealtimeHub | None,
        storage: FileStorage | None = None,
        file_db_handler: UploadedFileDBHandler | None = None,
    ):
        self.hub = hub
        self.storage = storage or FileStorage()
        self.file_db_handler = file_db_handler or UploadedFileDBHandler()

    async def run(
        self, owner_id: uuid.UUID, filename: str, mime_type: str | None, raw: bytes
    ) -> UploadedFile:
        if self.hub is None:
            raise ServiceUnavailableError(
                "Server configuration error: realtime channel not initialized."
            )

        name = safe_filename(filename)
        if not name:
            raise InvalidOperationError("Uploaded file has no filename.")
        if not raw:
            raise InvalidOperationError("Uploaded file is empty.")
        mime_type = mime_type or "application/octet-stream"

        progress = ProgressReporter(self.hub, str(owner_id), FILE_PROCESSING_PROGRESS)
        final_path = self.storage.path_for(owner_id, name)
        staging_path = None

        try:
            await progress.report(5, "Starting file upload...")
            logger.info(f"User {owner_id}: Starting file upload for {name}")

            await self.storage.ensure_owner_dir(owner_id)
            await progress.report(15, "Upload directory ensured.")

            staging_path = await self.storage.write_staged(final_path, raw)
            await progress.report(40, "File saved to server.")

            await progress.report(60, "Parsing Excel data...")
            rows = await asyncio.to_thread(decode_rows, raw)
            await progress.report(80, "Excel data parsed.")
            logger.info(f"User {owner_id}: Decoded {len(rows)} rows from {name}")

            async with _commit_lock(final_path):
                record = await self.file_db_handler.upsert_file(
                    owner_id,
                    name,
                    filepath=str(final_path),
                    mime_type=mime_type,
                    data=rows,
                    upload_date=datetime.now(UTC),
                )
                await self.storage.commit_staged(staging_path, final_path)
                staging_path = None
            await progress.report(95, "File metadata saved to database.")
            logger.info(f"User {owner_id}: File metadata saved to DB. File ID: {record.id}")

            await progress.report(100, "File uploaded and processed successfully!")
            return record

        except Exception as e:
            logger.error(
                f"User {owner_id}: Error processing file {name}: {e}", exc_info=True
            )
            await progress.fail_processing(f"Error processing file: {e}", str(e))
            raise UploadFailedError("Error processing file", cause=e) from e

        finally:
            if staging_path is not None:
                await self.storage.discard(staging_path)
