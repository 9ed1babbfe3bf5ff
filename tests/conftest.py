"""Pytest configuration and shared fixtures."""

import logging
from collections.abc import AsyncIterator, Iterator

import pytest
from fastapi.testclient import TestClient

from src.core import db_client
from src.core.config import settings
from src.core.scheduler_tracker import job_tracker
from src.interface.dependencies import reset_view_sessions
from src.main import app


logger = logging.getLogger(__name__)


@pytest.fixture
async def sqlite_db(tmp_path, monkeypatch) -> AsyncIterator[str]:
    """Point db_client at a fresh SQLite file with the schema applied."""
    db_path = str(tmp_path / "tasks.db")
    monkeypatch.setattr(settings, "sqlite_db_path", db_path)

    await db_client.init_db()
    yield db_path
    await db_client.close_connection()


@pytest.fixture
def test_client(tmp_path, monkeypatch) -> Iterator[TestClient]:
    """Provide a FastAPI test client backed by its own SQLite file."""
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "api.db"))
    monkeypatch.setattr(settings, "enable_scheduler", False)
    reset_view_sessions()
    job_tracker.reset()

    with TestClient(app) as client:
        yield client
