"""Chat endpoint that renders the cognitive twin prompt and schedules analysis."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError

from .chat_service import ChatProviderError, ChatService
from .cognitive_profile import CognitiveProfile, default_profile
from .cognitive_twin_store import CognitiveTwinStore
from .dependencies import get_chat_service, get_queue, get_twin_store
from .learning_analytics import ChatMessage, session_from_chat
from .telemetry import emit_event

router = APIRouter(prefix="/api/chat", tags=["chat"])
logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    messages: List[ChatMessage] = Field(default_factory=list)
    mode: Literal["learning", "advocacy", "general"] = "general"
    context: Optional[Dict[str, Any]] = None

    @field_validator("user_id")
    @classmethod
    def _strip_user_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("user_id cannot be blank")
        return stripped


def _load_profile(store: CognitiveTwinStore, user_id: str) -> CognitiveProfile:
    try:
        return store.get_or_default(user_id)
    except (SQLAlchemyError, RuntimeError) as exc:
        logger.warning("Using default cognitive profile for user=%s: %s", user_id, exc)
        return default_profile(user_id)


@router.post("")
def chat(
    payload: ChatRequest,
    service: ChatService = Depends(get_chat_service),
    store: CognitiveTwinStore = Depends(get_twin_store),
) -> Dict[str, Any]:
    profile = _load_profile(store, payload.user_id)

    try:
        reply = service.respond(payload.mode, payload.messages, profile, payload.context)
    except ChatProviderError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="AI service error") from exc

    response: Dict[str, Any] = {
        "message": reply.message,
        "mode": payload.mode,
        "profile": {
            "learning_style": profile.learning_style,
            "communication_preference": profile.communication_preference,
        },
    }
    if reply.note:
        response["note"] = reply.note

    if payload.mode == "learning" and reply.used_provider:
        job_id = _schedule_analysis(payload, profile)
        if job_id:
            response["analysis_job_id"] = job_id
    return response


def _schedule_analysis(payload: ChatRequest, profile: CognitiveProfile) -> Optional[str]:
    """Hand the exchange to the analysis queue; never fails the chat reply."""
    context = payload.context or {}
    duration = context.get("duration_minutes", 0)
    if not isinstance(duration, (int, float)) or isinstance(duration, bool) or duration < 0:
        duration = 0
    try:
        session = session_from_chat(payload.messages, context, duration_minutes=duration)
        job = get_queue().submit(payload.user_id, session, profile)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Could not schedule session analysis for user=%s", payload.user_id)
        emit_event("analysis_failed", job_id=None, user_id=payload.user_id, error=exc)
        return None
    return job.job_id


__all__ = ["ChatRequest", "router"]
