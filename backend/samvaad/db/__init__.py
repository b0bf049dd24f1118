"""Database utilities for the Samvaad backend."""

from .session import dispose_engine, get_engine, init_models, session_scope

__all__ = ["dispose_engine", "get_engine", "init_models", "session_scope"]
