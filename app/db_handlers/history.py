from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.db_handlers.base import BaseDBHandler, check_local_db
from app.models.history_entry import HistoryEntry


class HistoryDBHandler(BaseDBHandler[HistoryEntry]):
    def __init__(self):
        super().__init__(HistoryEntry)

    @check_local_db
    async def list_for_user(
        self, user_id: uuid.UUID, *, db: AsyncSession = None
    ) -> list[HistoryEntry]:
        """A user's own history, newest first."""
        return await self.get_multi_by_attributes(
            db=db,
            user_id=user_id,
            order_by=[HistoryEntry.timestamp.desc(), HistoryEntry.id.asc()],
        )
