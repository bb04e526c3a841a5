# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from task_manager.app.main import create_app
from task_manager.config import FeaturesConfig, Settings
from task_manager.domain.sample_tasks import sample_tasks
from task_manager.infra.memory.task_store import InMemoryTaskStore


@pytest.fixture()
def store() -> InMemoryTaskStore:
    """Store seeded with the four demonstration tasks (ids 1..4)."""
    return InMemoryTaskStore(max_tasks=100, seed=sample_tasks())


@pytest.fixture()
def empty_store() -> InMemoryTaskStore:
    return InMemoryTaskStore(max_tasks=100)


@pytest.fixture(autouse=True)
def _log_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    # keep JSON log files out of the working tree
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("LOG_DIR", str(log_dir))
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    return log_dir


@pytest.fixture()
def settings() -> Settings:
    """Settings built in code so tests never read config.json or env overrides."""
    return Settings(features=FeaturesConfig(rate_limit_per_min=0))


@pytest.fixture()
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))
