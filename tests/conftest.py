"""
This file contains shared fixtures and configuration for the test suite.

Pytest will automatically discover and use the fixtures defined in this file.

The application is pointed at a throwaway SQLite database and upload
directory before anything from ``app`` is imported, so the module-level
settings and engine pick them up.
"""

import asyncio
import os
import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="excel_analytics_tests_"))
os.environ["EXCEL_ANALYTICS_DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{(_TEST_ROOT / 'test.db').as_posix()}"
)
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["LOG_DIR"] = str(_TEST_ROOT / "logs")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["GEMINI_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.config import settings  # noqa: E402
from app.db import app_engine  # noqa: E402
from app.db_handlers import UserDBHandler  # noqa: E402
from app.models.base import Base  # noqa: E402
from app.services.llm_interface import LLMInterface  # noqa: E402
from app.services.realtime import RealtimeHub  # noqa: E402
from app.utils.auth import get_password_hash  # noqa: E402


class FakeSummarizer(LLMInterface):
    """Stands in for the remote LLM and remembers every prompt it was given."""

    def __init__(self, reply: str = "Sales grew steadily.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def generate_text(self, prompt: str, temperature=0.7, max_tokens=None, **kwargs) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class RecordingHub(RealtimeHub):
    """A hub without sockets that keeps every emitted event."""

    def __init__(self):
        super().__init__()
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    async def emit(self, room: str, event: str, payload: dict[str, Any]) -> int:
        self.events.append((room, event, dict(payload)))
        return 0

    def progress_of(self, event: str) -> list[int]:
        return [payload["progress"] for _, name, payload in self.events if name == event]


async def _recreate_tables():
    async with app_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def reset_state() -> Generator[None, None, None]:
    """Fresh tables and an empty upload directory for every test."""
    # A private loop leaves whatever loop pytest-asyncio installed untouched.
    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(_recreate_tables())
    finally:
        loop.close()
    upload_root = Path(settings.upload_dir)
    shutil.rmtree(upload_root, ignore_errors=True)
    upload_root.mkdir(parents=True, exist_ok=True)
    yield


@pytest.fixture(scope="session")
def app() -> FastAPI:
    """
    Create a new application instance for the test session.
    """
    from main import create_app

    return create_app()


@pytest.fixture
def summarizer(app: FastAPI) -> Generator[FakeSummarizer, None, None]:
    from app.dependencies.llm import get_llm_client

    fake = FakeSummarizer()
    app.dependency_overrides[get_llm_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_llm_client, None)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """
    Fixture to get a test client for making API requests.
    The TestClient handles the application's lifespan events (startup/shutdown).
    """
    with TestClient(app) as c:
        yield c


@pytest.fixture
def hub() -> RecordingHub:
    return RecordingHub()


# --- helpers ---


def register(
    client: TestClient,
    email: str,
    password: str = "secret123",
    name: str = "Test User",
    is_admin: bool = False,
):
    return client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password, "isAdmin": is_admin},
    )


def login(client: TestClient, email: str, password: str = "secret123") -> str:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


def auth_headers(token: str) -> dict[str, str]:
    return {settings.auth_header_name: token}


def signup(client: TestClient, email: str, is_admin: bool = False) -> str:
    """Register and log in, returning the access token."""
    assert register(client, email, is_admin=is_admin).status_code == 201
    return login(client, email)


async def create_user(email: str = "owner@example.com", is_admin: bool = False):
    return await UserDBHandler().create(
        {
            "name": email.split("@")[0],
            "email": email,
            "hashed_password": get_password_hash("secret123"),
            "is_admin": is_admin,
        }
    )
