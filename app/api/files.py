"""
File API Routes - spreadsheet upload, listing and deletion.

Every route here works on the caller's own files only; another user's file
is indistinguishable from a missing one.
"""

import uuid

from fastapi import APIRouter, Depends, File, UploadFile

from app.config import settings
from app.db_handlers import UploadedFileDBHandler
from app.dependencies.auth import get_current_identity
from app.dependencies.history import log_request_history
from app.dependencies.realtime import get_realtime_hub
from app.schemas import (
    FileInfo,
    FileListResponse,
    MessageResponse,
    TokenIdentity,
    UploadResponse,
)
from app.services.errors import (
    InvalidOperationError,
    NotFoundError,
    PayloadTooLargeError,
)
from app.services.file_storage import FileStorage
from app.services.realtime import RealtimeHub
from app.services.upload_service import UploadPipeline
from app.utils.logger import setup_logger

logger = setup_logger("api.files")

router = APIRouter(
    prefix="/api/files",
    tags=["Files"],
    dependencies=[Depends(log_request_history)],
)


def _parse_file_id(file_id: str) -> uuid.UUID | None:
    """Ids that are not UUIDs cannot name a stored file."""
    try:
        return uuid.UUID(file_id)
    except ValueError:
        return None


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: UploadFile | None = File(None),
    identity: TokenIdentity = Depends(get_current_identity),
    hub: RealtimeHub = Depends(get_realtime_hub),
):
    """
    Upload a spreadsheet (multipart field ``file``).

    Progress is pushed to the caller's realtime room while the file is
    stored, decoded and saved.
    """
    if file is None or not file.filename:
        raise InvalidOperationError("No file uploaded.")

    raw = await file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(raw) > max_bytes:
        raise PayloadTooLargeError(
            f"File exceeds the maximum upload size of {settings.max_upload_size_mb} MB."
        )

    record = await UploadPipeline(hub).run(
        identity.id, file.filename, file.content_type, raw
    )
    return UploadResponse(
        message="File uploaded and processed successfully!",
        file_id=record.id,
        filename=record.filename,
    )


@router.get("", response_model=FileListResponse)
async def list_files(
    identity: TokenIdentity = Depends(get_current_identity),
    file_db_handler: UploadedFileDBHandler = Depends(),
):
    """Return the caller's files, newest upload first."""
    files = await file_db_handler.list_files_for_owner(identity.id)
    return FileListResponse(files=[FileInfo.model_validate(f) for f in files])


@router.get("/{file_id}", response_model=FileInfo)
async def get_file(
    file_id: str,
    identity: TokenIdentity = Depends(get_current_identity),
    file_db_handler: UploadedFileDBHandler = Depends(),
):
    """Return one of the caller's files with its decoded rows."""
    parsed_id = _parse_file_id(file_id)
    record = (
        await file_db_handler.get_owned_file(parsed_id, identity.id)
        if parsed_id is not None
        else None
    )
    if record is None:
        raise NotFoundError("File not found.")
    return FileInfo.model_validate(record)


@router.delete("/{file_id}", response_model=MessageResponse)
async def delete_file(
    file_id: str,
    identity: TokenIdentity = Depends(get_current_identity),
    file_db_handler: UploadedFileDBHandler = Depends(),
):
    """Delete one of the caller's files from disk and from the database."""
    parsed_id = _parse_file_id(file_id)
    record = (
        await file_db_handler.get_owned_file(parsed_id, identity.id)
        if parsed_id is not None
        else None
    )
    if record is None:
        raise NotFoundError("File not found or not authorized to delete.")

    await FileStorage().delete(record.filepath)
    await file_db_handler.remove(record.id)
    logger.info(f"User {identity.id}: deleted file {record.id} ({record.filename})")
    return MessageResponse(message="File deleted successfully.")
