from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import pytest

os.environ.setdefault("SAMVAAD_DATABASE_URL", "sqlite://")
os.environ.pop("AZURE_OPENAI_ENDPOINT", None)
os.environ.pop("AZURE_OPENAI_API_KEY", None)

from samvaad.config import get_settings  # noqa: E402
from samvaad.db.base import Base  # noqa: E402
from samvaad.db import models  # noqa: E402,F401
from samvaad.db.session import dispose_engine, get_engine  # noqa: E402
from samvaad.telemetry import clear_listeners  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    clear_listeners()
    yield
    clear_listeners()


@pytest.fixture
def database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Fresh SQLite file per test so worker threads share one database."""
    db_path = tmp_path / "samvaad.db"
    monkeypatch.setenv("SAMVAAD_DATABASE_URL", f"sqlite:///{db_path}")
    get_settings.cache_clear()
    dispose_engine()
    engine = get_engine()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield
    dispose_engine()
    get_settings.cache_clear()
