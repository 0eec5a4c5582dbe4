"""
Best-effort audit logging.

A failed history write is logged and otherwise ignored; it must never fail
the request that triggered it.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from app.db_handlers.history import HistoryDBHandler
from app.utils.logger import setup_logger

logger = setup_logger("history_service")


async def log_action(
    user_id: uuid.UUID | str | None,
    action: str,
    details: dict[str, Any] | None = None,
    *,
    history_db_handler: HistoryDBHandler | None = None,
) -> None:
    if user_id is None:
        logger.debug(f"Logging action '{action}' without a user id")
    elif not isinstance(user_id, uuid.UUID):
        try:
            user_id = uuid.UUID(str(user_id))
        except ValueError:
            logger.warning(f"Unresolvable user id '{user_id}' for action '{action}'")
            user_id = None

    handler = history_db_handler or HistoryDBHandler()
    try:
        await handler.create(
            {
                "user_id": user_id,
                "action": action,
                "details": details or {},
                "timestamp": datetime.now(UTC),
            }
        )
    except Exception as e:
        logger.error(f"Error logging history action '{action}': {e}", exc_info=True)
