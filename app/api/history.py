from fastapi import APIRouter, Depends

from app.db_handlers import HistoryDBHandler
from app.dependencies.auth import get_current_identity
from app.dependencies.history import log_request_history
from app.schemas import HistoryEntryInfo, HistoryResponse, TokenIdentity

router = APIRouter(
    prefix="/api/history",
    tags=["History"],
    dependencies=[Depends(log_request_history)],
)


@router.get("", response_model=HistoryResponse)
async def get_my_history(
    identity: TokenIdentity = Depends(get_current_identity),
    history_db_handler: HistoryDBHandler = Depends(),
):
    """Return the caller's own history entries, newest first."""
    entries = await history_db_handler.list_for_user(identity.id)
    return HistoryResponse(
        history=[HistoryEntryInfo.model_validate(entry) for entry in entries]
    )
