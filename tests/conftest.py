"""Shared test fixtures: catalog, clock, histories and data directories."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

from microdose_engine.catalog import build_default_catalog
from microdose_engine.config import Config
from microdose_engine.models.catalog import Catalog
from microdose_engine.models.context import UserContext
from microdose_engine.models.session import Session
from microdose_store.paths import DataPaths


@pytest.fixture
def catalog() -> Catalog:
    return build_default_catalog()


@pytest.fixture
def now() -> datetime:
    """Fixed decision time: 2024-03-05 12:00 UTC."""
    return datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_session(now: datetime) -> Callable[..., Session]:
    """Factory: ``make_session("emom_burpee_5m", hours_ago=5)``."""

    def _make(definition_id: str, hours_ago: float = 1.0, **kwargs) -> Session:
        kwargs.setdefault("id", uuid.uuid4())
        return Session(
            definition_id=definition_id,
            performed_at=now - timedelta(hours=hours_ago),
            **kwargs,
        )

    return _make


@pytest.fixture
def empty_context(now: datetime) -> UserContext:
    """Brand-new user: no history, no state, no strength signal."""
    return UserContext(now=now)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "microdose"


@pytest.fixture
def paths(data_dir: Path) -> DataPaths:
    paths = DataPaths(data_dir)
    paths.ensure_dirs()
    return paths


@pytest.fixture
def config(data_dir: Path) -> Config:
    return Config(data_dir=data_dir, lock_timeout_s=1.0)
