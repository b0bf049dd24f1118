"""Lazily built engine and transactional sessions for cognitive twin storage.

Request handlers and analysis worker threads share one engine; the first
caller builds it from ``SAMVAAD_DATABASE_URL``.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import Settings, get_settings
from .base import Base

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker[Session]] = None
_lock = threading.Lock()

_IN_MEMORY_SQLITE_URLS = {"sqlite://", "sqlite:///:memory:"}


def _engine_options(settings: Settings, url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.database_echo, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
        return options
    # Analysis workers use connections created on the request thread.
    options["connect_args"] = {"check_same_thread": False}
    if url in _IN_MEMORY_SQLITE_URLS:
        options["poolclass"] = StaticPool
    return options


def get_engine() -> Engine:
    global _engine, _session_factory
    with _lock:
        if _engine is None:
            settings = get_settings()
            url = settings.database_url
            if not url:
                raise RuntimeError("SAMVAAD_DATABASE_URL must be configured before using the database.")
            _engine = create_engine(url, **_engine_options(settings, url))
            _session_factory = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
        return _engine


def init_models() -> None:
    """Create the cognitive twin tables directly (SQLite development and tests)."""
    from . import models  # noqa: F401

    Base.metadata.create_all(get_engine())


@contextmanager
def session_scope(*, commit: bool = True) -> Generator[Session, None, None]:
    get_engine()
    assert _session_factory is not None
    session = _session_factory()
    try:
        yield session
        if commit:
            session.commit()
    except Exception:  # noqa: BLE001
        session.rollback()
        raise
    finally:
        session.close()


def dispose_engine() -> None:
    global _engine, _session_factory
    with _lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _session_factory = None


__all__ = ["dispose_engine", "get_engine", "init_models", "session_scope"]
