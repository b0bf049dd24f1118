"""Cognitive twin profile and insight endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from .cognitive_profile import CommunicationPreference, LearningStyle
from .cognitive_twin_store import CognitiveTwinStore
from .dependencies import get_twin_store, path_user_id
from .learning_analytics import LearningAnalyticsEngine, SessionRecord
from .telemetry import emit_event

router = APIRouter(prefix="/api/cognitive-twin", tags=["cognitive-twin"])
logger = logging.getLogger(__name__)

_engine = LearningAnalyticsEngine()


class PreferenceUpdateRequest(BaseModel):
    learning_style: Optional[LearningStyle] = None
    communication_preference: Optional[CommunicationPreference] = None


@router.get("/{user_id}")
def read_profile(
    user_id: str = Depends(path_user_id),
    store: CognitiveTwinStore = Depends(get_twin_store),
) -> Dict[str, Any]:
    return store.get_or_default(user_id).model_dump(mode="json")


@router.put("/{user_id}/preferences")
def update_preferences(
    payload: PreferenceUpdateRequest,
    user_id: str = Depends(path_user_id),
    store: CognitiveTwinStore = Depends(get_twin_store),
) -> Dict[str, Any]:
    profile = store.get_or_default(user_id)
    changes = payload.model_dump(exclude_none=True)
    if changes:
        profile = store.save_profile(profile.model_copy(update=changes))
        emit_event("profile_preferences_updated", user_id=user_id, fields=sorted(changes))
    return profile.model_dump(mode="json")


@router.get("/{user_id}/insights")
def list_insights(
    user_id: str = Depends(path_user_id),
    include_read: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    store: CognitiveTwinStore = Depends(get_twin_store),
) -> Dict[str, Any]:
    insights = store.list_insights(user_id, include_read=include_read, limit=limit)
    return {"insights": [insight.model_dump(mode="json") for insight in insights]}


@router.post("/{user_id}/insights/{insight_id}/read")
def mark_insight_read(
    insight_id: str,
    user_id: str = Depends(path_user_id),
    store: CognitiveTwinStore = Depends(get_twin_store),
) -> Dict[str, Any]:
    try:
        insight = store.mark_read(user_id, insight_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return insight.model_dump(mode="json")


@router.post("/{user_id}/insights/{insight_id}/dismiss")
def dismiss_insight(
    insight_id: str,
    user_id: str = Depends(path_user_id),
    store: CognitiveTwinStore = Depends(get_twin_store),
) -> Dict[str, Any]:
    try:
        insight = store.dismiss(user_id, insight_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return insight.model_dump(mode="json")


@router.post("/{user_id}/analyze")
def analyze_session(
    session: SessionRecord,
    user_id: str = Depends(path_user_id),
    store: CognitiveTwinStore = Depends(get_twin_store),
) -> Dict[str, Any]:
    """Synchronous analysis for clients that report a finished session explicitly."""
    profile = store.get_or_default(user_id)
    analysis = _engine.analyze(session, profile)
    updated = store.record_analysis(user_id, analysis)
    logger.info("Analyzed session for user=%s topic=%s", user_id, session.topic)
    return {
        "analysis": analysis.model_dump(mode="json", exclude_none=True),
        "profile": updated.model_dump(mode="json"),
    }


__all__ = ["router"]
