from app.dependencies.auth import get_current_identity, require_admin
from app.dependencies.history import log_request_history
from app.dependencies.llm import get_llm_client
from app.dependencies.realtime import get_realtime_hub

__all__ = [
    "get_current_identity",
    "require_admin",
    "log_request_history",
    "get_llm_client",
    "get_realtime_hub",
]
