import uuid
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# --- Authentication ---


class UserRegister(BaseModel):
    # Fields are optional so the route can answer 400 (and log the attempt)
    # instead of FastAPI's 422.
    name: str | None = Field(None, description="Display name for the new account")
    email: str | None = Field(None, description="Email address, unique per account")
    password: str | None = Field(None, description="Password for the new account")
    is_admin: bool | None = Field(
        None, alias="isAdmin", description="Create the account as an administrator"
    )

    model_config = ConfigDict(populate_by_name=True)


class UserLogin(BaseModel):
    email: str | None = Field(None, description="Email for login")
    password: str | None = Field(None, description="Password for login")


class TokenIdentity(BaseModel):
    """The identity carried by a valid access token."""

    id: UUID = Field(..., description="User unique identifier")
    is_admin: bool = Field(False, serialization_alias="isAdmin")
    username: str | None = Field(None, description="Display name at login time")


class MessageResponse(BaseModel):
    message: str = Field(..., description="Response message")


class LoginResponse(MessageResponse):
    token: str = Field(..., description="JWT access token")


# --- Files ---


class UploadResponse(MessageResponse):
    file_id: uuid.UUID = Field(..., serialization_alias="fileId")
    filename: str


class FileInfo(BaseModel):
    id: uuid.UUID
    filename: str
    filepath: str
    mime_type: str = Field(..., serialization_alias="mimeType")
    data: list[dict[str, Any]] = Field(default_factory=list)
    upload_date: datetime = Field(..., serialization_alias="uploadDate")
    owner_id: uuid.UUID = Field(..., serialization_alias="ownerId")

    model_config = ConfigDict(from_attributes=True)


class FileListResponse(BaseModel):
    files: list[FileInfo]


class UploaderInfo(BaseModel):
    id: uuid.UUID
    email: str

    model_config = ConfigDict(from_attributes=True)


class AdminFileInfo(FileInfo):
    uploaded_by: UploaderInfo | None = Field(
        None, validation_alias="owner", serialization_alias="uploadedBy"
    )


class AdminFileListResponse(BaseModel):
    files: list[AdminFileInfo]


# --- Analysis ---


class AnalyzeResponse(MessageResponse):
    insights: str = Field(..., description="Summary produced by the LLM")


# --- Users / administration ---


class UserInfo(BaseModel):
    id: UUID = Field(..., description="User unique identifier")
    name: str
    email: str
    is_admin: bool = Field(False, serialization_alias="isAdmin")
    created_at: datetime = Field(..., serialization_alias="createdAt")

    model_config = ConfigDict(from_attributes=True)


class UsersResponse(BaseModel):
    users: list[UserInfo]


class DeleteUserResponse(MessageResponse):
    deleted_files: int = Field(..., serialization_alias="deletedFiles")


# --- History ---


class HistoryEntryInfo(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID | None = Field(None, serialization_alias="userId")
    action: str
    details: dict[str, Any] | None = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class HistoryResponse(BaseModel):
    history: list[HistoryEntryInfo]
