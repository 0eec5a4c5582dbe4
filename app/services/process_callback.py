"""
Progress reporting for the upload and analysis pipelines.

A ``ProgressReporter`` publishes ``{progress, message, result?}`` payloads to
one user's realtime room. Reporting must never break the pipeline that
drives it, so every failure here is logged and swallowed.
"""

from typing import Any

from app.services.realtime import PROCESSING_ERROR, RealtimeHub
from app.utils.logger import setup_logger

logger = setup_logger("process_callback")


class ProgressReporter:
    """
    Ordered progress events for one pipeline run.

    Percentages never go backwards during a run; the terminal failure event
    is the only one allowed to reset to 0.
    """

    def __init__(self, hub: RealtimeHub, room: str, event: str):
        self.hub = hub
        self.room = room
        self.event = event
        self.last_progress = 0

    async def _publish(self, event: str, payload: dict[str, Any]) -> None:
        try:
            await self.hub.emit(self.room, event, payload)
        except Exception as e:
            logger.error(
                f"Error publishing '{event}' to room {self.room}: {e}", exc_info=False
            )

    async def report(
        self, progress: int, message: str, result: Any | None = None
    ) -> None:
        if progress < self.last_progress:
            logger.warning(
                f"Progress for '{self.event}' went backwards ({self.last_progress} -> {progress}), clamping"
            )
            progress = self.last_progress
        progress = min(progress, 100)
        self.last_progress = progress

        payload: dict[str, Any] = {"progress": progress, "message": message}
        if result is not None:
            payload["result"] = result
        logger.info(f"Room {self.room}: {self.event} - {message} ({progress}%)")
        await self._publish(self.event, payload)

    async def fail(
        self, message: str, result: Any | None = None, *, event: str | None = None
    ) -> None:
        """Emit the terminal zero-progress event."""
        self.last_progress = 0
        payload: dict[str, Any] = {"progress": 0, "message": message}
        if result is not None:
            payload["result"] = result
        logger.info(f"Room {self.room}: {event or self.event} - {message} (0%)")
        await self._publish(event or self.event, payload)

    async def fail_processing(self, message: str, details: str) -> None:
        await self.fail(message, details, event=PROCESSING_ERROR)
