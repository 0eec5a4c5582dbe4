from fastapi import Request
from starlette.requests import HTTPConnection

from app.services.errors import ServiceUnavailableError
from app.services.realtime import RealtimeHub
from app.utils.logger import setup_logger

logger = setup_logger("dependencies")


def hub_from_app(connection: HTTPConnection) -> RealtimeHub | None:
    return getattr(connection.app.state, "realtime_hub", None)


def get_realtime_hub(request: Request) -> RealtimeHub:
    """FastAPI dependency returning the hub created during startup."""
    hub = hub_from_app(request)
    if hub is None:
        logger.critical(
            "Realtime hub requested before startup created it. Check the application lifespan."
        )
        raise ServiceUnavailableError(
            "Server configuration error: realtime channel not initialized."
        )
    return hub
