from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.uploaded_file import UploadedFile
from app.utils.logger import setup_logger

logger = setup_logger("db_handlers.uploaded_file")

# Newest upload first; equal upload dates fall back to creation order and
# finally the primary key so the answer never depends on storage order.
MOST_RECENT_ORDER = (
    UploadedFile.upload_date.desc(),
    UploadedFile.created_at.desc(),
    UploadedFile.id.asc(),
)


class UploadedFileDBHandler(BaseDBHandler[UploadedFile]):
    def __init__(self):
        super().__init__(UploadedFile)

    async def _apply_upsert(
        self, db: AsyncSession, owner_id: uuid.UUID, filename: str, values: dict[str, Any]
    ) -> UploadedFile:
        stmt = select(UploadedFile).where(
            UploadedFile.owner_id == owner_id, UploadedFile.filename == filename
        )
        existing = (await db.execute(stmt)).scalar_one_or_none()
        if existing is None:
            record = UploadedFile(owner_id=owner_id, filename=filename, **values)
            db.add(record)
        else:
            record = existing
            for field, value in values.items():
                setattr(record, field, value)
        await db.flush()
        return record

    @check_local_db
    async def upsert_file(
        self,
        owner_id: uuid.UUID,
        filename: str,
        *,
        filepath: str,
        mime_type: str,
        data: list[dict[str, Any]],
        upload_date: datetime,
        db: AsyncSession = None,
    ) -> UploadedFile:
        """
        Insert or replace the record keyed by (owner_id, filename).

        The whole upsert is one transaction: it either commits the new
        content or leaves the previous record exactly as it was.
        """
        values = {
            "filepath": filepath,
            "mime_type": mime_type,
            "data": data,
            "upload_date": upload_date,
        }
        try:
            record = await self._apply_upsert(db, owner_id, filename, values)
            await db.commit()
        except IntegrityError:
            # A concurrent upload inserted the same key first; last write wins.
            await db.rollback()
            logger.warning(
                f"Concurrent insert detected for owner {owner_id} / '{filename}', retrying as update"
            )
            record = await self._apply_upsert(db, owner_id, filename, values)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                f"Error upserting file '{filename}' for owner {owner_id}: {e}",
                exc_info=True,
            )
            raise
        await db.refresh(record)
        return record

    @check_local_db
    async def get_owned_file(
        self, file_id: uuid.UUID, owner_id: uuid.UUID, *, db: AsyncSession = None
    ) -> UploadedFile | None:
        """Get a file only if it belongs to ``owner_id``."""
        return await self.get_by_attributes(db=db, id=file_id, owner_id=owner_id)

    @check_local_db
    async def list_files_for_owner(
        self, owner_id: uuid.UUID, *, db: AsyncSession = None
    ) -> list[UploadedFile]:
        return await self.get_multi_by_attributes(
            db=db, owner_id=owner_id, order_by=list(MOST_RECENT_ORDER)
        )

    @check_local_db
    async def get_most_recent_file(
        self, owner_id: uuid.UUID, *, db: AsyncSession = None
    ) -> UploadedFile | None:
        files = await self.get_multi_by_attributes(
            db=db, owner_id=owner_id, order_by=list(MOST_RECENT_ORDER), limit=1
        )
        return files[0] if files else None

    @check_local_db
    async def list_all_files(self, *, db: AsyncSession = None) -> list[UploadedFile]:
        """Every file in the system with its owner preloaded."""
        return await self.get_multi_by_attributes(
            db=db,
            options=[selectinload(UploadedFile.owner)],
            order_by=list(MOST_RECENT_ORDER),
        )
