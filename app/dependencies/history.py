from fastapi import Depends, Request

from app.dependencies.auth import get_current_identity
from app.schemas import TokenIdentity
from app.services.history_service import log_action


async def log_request_history(
    request: Request,
    identity: TokenIdentity = Depends(get_current_identity),
) -> None:
    """
    Router-level dependency recording every authenticated request.

    Only path and query parameters are stored; request bodies are left
    unread so multipart uploads are not consumed twice.
    """
    await log_action(
        identity.id,
        f"{request.method} {request.url.path}",
        {
            "path_params": dict(request.path_params),
            "query_params": dict(request.query_params),
        },
    )
