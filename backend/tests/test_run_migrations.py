from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect

from scripts import run_migrations as runner


def _config(monkeypatch: pytest.MonkeyPatch, url: str):
    monkeypatch.setenv("SAMVAAD_DATABASE_URL", url)
    return runner.build_config(str(runner.BACKEND_ROOT / "alembic.ini"))


def test_resolve_database_url_prefers_env(monkeypatch: pytest.MonkeyPatch) -> None:
    config = _config(monkeypatch, "sqlite://")
    assert runner.resolve_database_url(config) == "sqlite://"
    assert config.get_main_option("sqlalchemy.url") == "sqlite://"


def test_resolve_database_url_requires_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    config = _config(monkeypatch, "")
    monkeypatch.delenv("SAMVAAD_DATABASE_URL")
    with pytest.raises(RuntimeError):
        runner.resolve_database_url(config)


def test_wait_for_database_times_out(monkeypatch: pytest.MonkeyPatch) -> None:
    class DownEngine:
        def connect(self):
            raise runner.OperationalError("SELECT 1", {}, Exception("refused"))

        def dispose(self) -> None:
            pass

    monkeypatch.setattr(runner, "create_engine", lambda *_, **__: DownEngine())
    with pytest.raises(RuntimeError, match="not ready"):
        runner.wait_for_database("postgresql://example", timeout=0, poll_interval=0)


def test_known_revisions_lists_schema(monkeypatch: pytest.MonkeyPatch) -> None:
    config = _config(monkeypatch, "sqlite://")
    assert "20261019_01_cognitive_twins" in runner.known_revisions(config)


def test_upgrade_creates_cognitive_twin_tables(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = _config(monkeypatch, url)

    runner.run_migrations("head", timeout=2, poll_interval=0.1, config=config)

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        assert {"cognitive_twins", "neural_insights"} <= tables
        columns = {column["name"] for column in inspector.get_columns("neural_insights")}
        assert "metadata" in columns
    finally:
        engine.dispose()


def test_main_returns_error_code_without_database(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SAMVAAD_DATABASE_URL", raising=False)
    assert runner.main(["--timeout", "0"]) == 1
