"""
Administrative API Routes - user and file overview, user deletion.

All routes require a token whose role flag marks an administrator.
"""

import uuid

from fastapi import APIRouter, Depends

from app.db_handlers import UploadedFileDBHandler, UserDBHandler
from app.dependencies.auth import require_admin
from app.dependencies.history import log_request_history
from app.schemas import (
    AdminFileInfo,
    AdminFileListResponse,
    DeleteUserResponse,
    TokenIdentity,
    UserInfo,
    UsersResponse,
)
from app.services.admin_service import AdminService
from app.services.errors import NotFoundError

router = APIRouter(
    prefix="/api/admin",
    tags=["Administration"],
    dependencies=[Depends(log_request_history)],
)


@router.get("/users", response_model=UsersResponse)
async def get_all_users(
    admin: TokenIdentity = Depends(require_admin),
    user_db_handler: UserDBHandler = Depends(),
):
    """List every user. Password hashes are never part of the response."""
    users = await user_db_handler.list_users()
    return UsersResponse(users=[UserInfo.model_validate(u) for u in users])


@router.get("/files", response_model=AdminFileListResponse)
async def get_all_files(
    admin: TokenIdentity = Depends(require_admin),
    file_db_handler: UploadedFileDBHandler = Depends(),
):
    """List every uploaded file together with its uploader."""
    files = await file_db_handler.list_all_files()
    return AdminFileListResponse(
        files=[AdminFileInfo.model_validate(f) for f in files]
    )


@router.delete("/users/{user_id}", response_model=DeleteUserResponse)
async def delete_user(
    user_id: str,
    admin: TokenIdentity = Depends(require_admin),
):
    """Delete a user and all of their files. Admins cannot delete themselves."""
    try:
        target_id = uuid.UUID(user_id)
    except ValueError as e:
        raise NotFoundError("User not found.") from e
    deleted_files = await AdminService().delete_user(admin.id, target_id)
    return DeleteUserResponse(
        message="User and all associated files deleted successfully.",
        deleted_files=deleted_files,
    )
