"""
Administrative user deletion.

Files go first and the user record last, one committed step at a time, so an
interruption can only ever leave a user with fewer files. Re-running the
deletion is always safe.
"""

import uuid

from app.db_handlers.uploaded_file import UploadedFileDBHandler
from app.db_handlers.user import UserDBHandler
from app.services.errors import InvalidOperationError, NotFoundError
from app.services.file_storage import FileStorage
from app.utils.logger import setup_logger

logger = setup_logger("admin_service")


class AdminService:
    def __init__(
        self,
        storage: FileStorage | None = None,
        user_db_handler: UserDBHandler | None = None,
        file_db_handler: UploadedFileDBHandler | None = None,
    ):
        self.storage = storage or FileStorage()
        self.user_db_handler = user_db_handler or UserDBHandler()
        self.file_db_handler = file_db_handler or UploadedFileDBHandler()

    async def delete_user(
        self, acting_admin_id: uuid.UUID, target_user_id: uuid.UUID
    ) -> int:
        """Delete a user and every file they own. Returns the number of files removed."""
        if acting_admin_id == target_user_id:
            raise InvalidOperationError(
                "Admins cannot delete their own account from the dashboard."
            )

        target = await self.user_db_handler.get(target_user_id)
        if target is None:
            raise NotFoundError("User not found.")

        files = await self.file_db_handler.list_files_for_owner(target_user_id)
        for file in files:
            try:
                await self.storage.delete(file.filepath)
            except OSError as e:
                logger.error(
                    f"Error deleting file from filesystem {file.filepath}: {e}",
                    exc_info=True,
                )
            await self.file_db_handler.remove(file.id)
        logger.info(f"Deleted {len(files)} files for user {target_user_id}")

        await self.user_db_handler.remove(target_user_id)
        logger.info(f"User {target.email} ({target_user_id}) deleted successfully.")
        return len(files)
