"""
Database models for Excel Analytics.

Architecture: User → UploadedFile, User → HistoryEntry.
"""

from app.models.history_entry import HistoryEntry
from app.models.uploaded_file import UploadedFile
from app.models.user import User

__all__ = [
    "User",
    "UploadedFile",
    "HistoryEntry",
]
