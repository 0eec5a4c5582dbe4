from app.db_handlers.base import BaseDBHandler, check_local_db
from app.db_handlers.history import HistoryDBHandler
from app.db_handlers.uploaded_file import UploadedFileDBHandler
from app.db_handlers.user import UserDBHandler

__all__ = [
    "BaseDBHandler",
    "check_local_db",
    "UserDBHandler",
    "UploadedFileDBHandler",
    "HistoryDBHandler",
]
