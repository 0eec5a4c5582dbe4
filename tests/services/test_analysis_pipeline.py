"""
Tests for the analysis pipeline with a fake summarizer.
"""

import io
from datetime import UTC, datetime

import openpyxl
import pytest
from conftest import FakeSummarizer, create_user

from app.db_handlers import UploadedFileDBHandler
from app.services.analysis_service import AnalysisPipeline, truncate_excerpt
from app.services.errors import (
    AnalysisFailedError,
    NotFoundError,
    ServiceUnavailableError,
    UnsupportedMediaTypeError,
)
from app.services.file_storage import FileStorage
from app.services.realtime import AI_ANALYSIS_PROGRESS
from app.services.upload_service import UploadPipeline

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path / "uploads")


async def _upload(hub, storage, owner_id, filename, raw, mime="text/csv"):
    return await UploadPipeline(hub, storage).run(owner_id, filename, mime, raw)


async def test_no_file_is_not_found_and_summarizer_is_never_called(hub, storage):
    owner = await create_user()
    summarizer = FakeSummarizer()

    with pytest.raises(NotFoundError):
        await AnalysisPipeline(hub, summarizer, storage).run(owner.id)

    assert summarizer.prompts == []
    assert hub.progress_of(AI_ANALYSIS_PROGRESS) == [10, 0]


async def test_long_content_is_truncated_to_excerpt(hub, storage):
    owner = await create_user()
    content = "value\n" + "\n".join(f"row{i:05d}" for i in range(2000)) + "\n"
    assert len(content) > 5000
    await _upload(hub, storage, owner.id, "long.csv", content.encode())
    summarizer = FakeSummarizer()

    await AnalysisPipeline(hub, summarizer, storage).run(owner.id)

    prompt = summarizer.prompts[0]
    assert content[:5000] in prompt
    assert content[:5001] not in prompt


def test_truncate_excerpt_keeps_short_text():
    assert truncate_excerpt("short") == "short"
    assert truncate_excerpt("abcdef", limit=3) == "abc"


async def test_success_reports_summary_with_final_event(hub, storage):
    owner = await create_user()
    await _upload(hub, storage, owner.id, "q1.csv", b"x,y\n1,2\n")
    hub.events.clear()
    summarizer = FakeSummarizer(reply="Two rows, y doubles x.")

    summary = await AnalysisPipeline(hub, summarizer, storage).run(owner.id)

    assert summary == "Two rows, y doubles x."
    assert hub.progress_of(AI_ANALYSIS_PROGRESS) == [10, 30, 60, 100]
    assert hub.events[-1][2]["result"] == summary
    assert "File Name: q1.csv" in summarizer.prompts[0]


async def test_workbook_is_sent_as_csv_text(hub, storage):
    owner = await create_user()
    workbook = openpyxl.Workbook()
    workbook.active.append(["drug", "qty"])
    workbook.active.append(["Aspirin", 3])
    buffer = io.BytesIO()
    workbook.save(buffer)
    await _upload(hub, storage, owner.id, "meds.xlsx", buffer.getvalue(), mime=XLSX_MIME)
    hub.events.clear()
    summarizer = FakeSummarizer()

    await AnalysisPipeline(hub, summarizer, storage).run(owner.id)

    assert "drug,qty\nAspirin,3\n" in summarizer.prompts[0]
    assert hub.progress_of(AI_ANALYSIS_PROGRESS) == [10, 20, 30, 60, 100]


async def test_unsupported_mime_type(hub, storage):
    owner = await create_user()
    await _upload(hub, storage, owner.id, "a.json", b"v\n1\n", mime="application/json")
    hub.events.clear()
    summarizer = FakeSummarizer()

    with pytest.raises(UnsupportedMediaTypeError):
        await AnalysisPipeline(hub, summarizer, storage).run(owner.id)

    assert summarizer.prompts == []
    assert hub.events[-1][2]["progress"] == 0


async def test_summarizer_failure_is_reported(hub, storage):
    owner = await create_user()
    await _upload(hub, storage, owner.id, "a.csv", b"v\n1\n")
    hub.events.clear()
    summarizer = FakeSummarizer(error=RuntimeError("quota exceeded"))

    with pytest.raises(AnalysisFailedError) as exc_info:
        await AnalysisPipeline(hub, summarizer, storage).run(owner.id)

    assert str(exc_info.value.cause) == "quota exceeded"
    room, event, payload = hub.events[-1]
    assert event == AI_ANALYSIS_PROGRESS
    assert payload["progress"] == 0
    assert "quota exceeded" in payload["message"]


async def test_missing_hub_or_summarizer_fails_fast(hub, storage):
    owner = await create_user()

    with pytest.raises(ServiceUnavailableError):
        await AnalysisPipeline(None, FakeSummarizer(), storage).run(owner.id)
    with pytest.raises(ServiceUnavailableError):
        await AnalysisPipeline(hub, None, storage).run(owner.id)
    assert hub.events == []


async def test_equal_upload_dates_resolve_deterministically(storage):
    owner = await create_user()
    handler = UploadedFileDBHandler()
    stamp = datetime(2026, 1, 1, tzinfo=UTC)
    for name in ("a.csv", "b.csv", "c.csv"):
        await handler.upsert_file(
            owner.id,
            name,
            filepath=str(storage.path_for(owner.id, name)),
            mime_type="text/csv",
            data=[],
            upload_date=stamp,
        )

    records = await handler.list_files_for_owner(owner.id)
    expected = sorted(records, key=lambda r: r.id)
    expected.sort(key=lambda r: r.created_at, reverse=True)

    picked = await handler.get_most_recent_file(owner.id)
    assert picked.id == expected[0].id
    assert picked.id == (await handler.get_most_recent_file(owner.id)).id
