"""
Analysis pipeline: summarise the caller's most recently uploaded file with
the configured LLM and report progress on ``ai_analysis_progress``.

The summarizer call is a single round trip; the intermediate progress
events only describe the steps around it. Nothing is persisted.
"""

import asyncio
import uuid

from app.config import settings
from app.db_handlers.uploaded_file import UploadedFileDBHandler
from app.prompts import build_file_summary_prompt
from app.services.errors import (
    AnalysisFailedError,
    NotFoundError,
    ServiceError,
    ServiceUnavailableError,
    UnsupportedMediaTypeError,
)
from app.services.file_storage import FileStorage
from app.services.llm_interface import LLMInterface
from app.services.process_callback import ProgressReporter
from app.services.realtime import AI_ANALYSIS_PROGRESS, RealtimeHub
from app.services.spreadsheet_codec import (
    CSV_MIME_TYPES,
    EXCEL_MIME_TYPES,
    decode_csv_text,
    workbook_to_csv,
)
from app.utils.logger import setup_logger

logger = setup_logger("analysis_service")


def truncate_excerpt(content: str, limit: int | None = None) -> str:
    limit = settings.analysis_excerpt_chars if limit is None else limit
    return content[:limit]


class AnalysisPipeline:
    def __init__(
        self,
        hub: RealtimeHub | None,
        summarizer: LLMInterface | None,
        storage: FileStorage | None = None,
        file_db_handler: UploadedFileDBHandler | None = None,
    ):
        self.hub = hub
        self.summarizer = summarizer
        self.storage = storage or FileStorage()
        self.file_db_handler = file_db_handler or UploadedFileDBHandler()

    async def _read_as_text(self, record, progress: ProgressReporter) -> str:
        mime_type = (record.mime_type or "").lower()
        if mime_type in CSV_MIME_TYPES:
            raw = await self.storage.read(record.filepath)
            return decode_csv_text(raw)
        if mime_type in EXCEL_MIME_TYPES:
            await progress.report(20, "Parsing Excel file for AI analysis...")
            raw = await self.storage.read(record.filepath)
            return await asyncio.to_thread(workbook_to_csv, raw)

        await progress.fail(
            "Unsupported file type for AI analysis.",
            f"Unsupported file type: {record.mime_type}. Please upload a CSV or Excel file.",
        )
        raise UnsupportedMediaTypeError(f"Unsupported file type: {record.mime_type}")

    async def run(self, user_id: uuid.UUID) -> str:
        if self.hub is None:
            raise ServiceUnavailableError(
                "Server error: realtime channel not initialized."
            )
        if self.summarizer is None:
            raise ServiceUnavailableError(
                "LLM service is not available due to a configuration error."
            )

        progress = ProgressReporter(self.hub, str(user_id), AI_ANALYSIS_PROGRESS)
        try:
            await progress.report(10, "Fetching most recent file.")
            record = await self.file_db_handler.get_most_recent_file(user_id)
            if record is None:
                await progress.fail(
                    "No file found for analysis.",
                    "No file found for AI analysis. Please upload a file first.",
                )
                raise NotFoundError("No file found for analysis.")

            logger.info(
                f"User {user_id}: analysing {record.filename} ({record.mime_type})"
            )
            content = await self._read_as_text(record, progress)

            await progress.report(
                30, f'Preparing data from "{record.filename}" for AI.'
            )
            prompt = build_file_summary_prompt(record.filename, truncate_excerpt(content))

            await progress.report(60, "Sending data to the AI model.")
            summary = await self.summarizer.generate_text(prompt)

            await progress.report(100, "AI analysis complete.", summary)
            return summary

        except ServiceError:
            raise
        except Exception as e:
            logger.error(f"User {user_id}: Error during AI analysis: {e}", exc_info=True)
            await progress.fail(
                f"Error during AI analysis: {e}", f"Failed to get insights: {e}"
            )
            raise AnalysisFailedError("Error during AI analysis.", cause=e) from e
