"""FastAPI dependency providers shared by the routers."""

from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException, status

from .analysis_queue import AnalysisQueue, get_analysis_queue
from .chat_service import ChatService
from .cognitive_twin_store import CognitiveTwinStore, twin_store
from .config import get_settings


@lru_cache
def _chat_service() -> ChatService:
    return ChatService(get_settings())


def get_chat_service() -> ChatService:
    return _chat_service()


def path_user_id(user_id: str) -> str:
    """Strip the ``{user_id}`` path segment; blank ids are rejected with 422."""
    normalized = user_id.strip()
    if not normalized:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="user_id cannot be blank")
    return normalized


def get_twin_store() -> CognitiveTwinStore:
    return twin_store


def get_queue() -> AnalysisQueue:
    return get_analysis_queue()


__all__ = ["get_chat_service", "get_queue", "get_twin_store", "path_user_id"]
