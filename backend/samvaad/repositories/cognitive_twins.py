"""Database-backed cognitive twin and neural insight repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..cognitive_profile import (
    CognitiveProfile,
    ProfileUpdate,
    apply_profile_update,
    default_profile,
    profile_from_record,
)
from ..db.models import CognitiveTwinModel, NeuralInsightModel
from ..learning_analytics import LearningInsight


def _normalize_user_id(user_id: str) -> str:
    normalized = user_id.strip()
    if not normalized:
        raise ValueError("User id cannot be empty.")
    return normalized


class StoredInsight(BaseModel):
    """Insight row as exposed to dashboards; created once, then read or dismissed."""

    id: str
    user_id: str
    type: str
    title: str
    description: str
    priority: str
    actionable: bool
    is_read: bool = False
    action_taken: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)
    expires_at: Optional[datetime] = None
    created_at: datetime


class CognitiveTwinRepository:
    """Session-scoped persistence helper; transactions belong to the caller."""

    def get(self, session: Session, user_id: str) -> CognitiveProfile | None:
        model = self._find(session, user_id)
        if model is None:
            return None
        return self._to_domain(model)

    def upsert(self, session: Session, user_id: str, update: ProfileUpdate) -> CognitiveProfile:
        """Merge ``update`` onto the stored profile, creating a default row when missing."""
        normalized = _normalize_user_id(user_id)
        model = self._find(session, normalized)
        if model is None:
            current = default_profile(normalized)
            model = CognitiveTwinModel(user_id=normalized)
            session.add(model)
        else:
            current = self._to_domain(model)

        merged = apply_profile_update(current, update)
        self._apply_profile(model, merged)
        model.last_sync_at = datetime.now(timezone.utc)
        session.flush()
        return self._to_domain(model)

    def save_profile(self, session: Session, profile: CognitiveProfile) -> CognitiveProfile:
        """Replace the stored profile wholesale (used for declared preference changes)."""
        normalized = _normalize_user_id(profile.user_id)
        model = self._find(session, normalized)
        if model is None:
            model = CognitiveTwinModel(user_id=normalized)
            session.add(model)
        self._apply_profile(model, profile)
        model.last_sync_at = datetime.now(timezone.utc)
        session.flush()
        return self._to_domain(model)

    def delete(self, session: Session, user_id: str) -> bool:
        normalized = _normalize_user_id(user_id)
        result = session.execute(
            delete(CognitiveTwinModel).where(CognitiveTwinModel.user_id == normalized)
        )
        session.execute(delete(NeuralInsightModel).where(NeuralInsightModel.user_id == normalized))
        return bool(result.rowcount)

    def add_insights(
        self,
        session: Session,
        user_id: str,
        insights: Iterable[LearningInsight],
    ) -> List[StoredInsight]:
        normalized = _normalize_user_id(user_id)
        models = [
            NeuralInsightModel(
                user_id=normalized,
                insight_type=insight.type,
                title=insight.title,
                description=insight.description,
                priority=insight.priority,
                is_actionable=insight.actionable,
                insight_metadata=dict(insight.metadata),
            )
            for insight in insights
        ]
        if not models:
            return []
        session.add_all(models)
        session.flush()
        return [self._insight_to_domain(model) for model in models]

    def list_insights(
        self,
        session: Session,
        user_id: str,
        *,
        include_read: bool = False,
        limit: int = 50,
    ) -> List[StoredInsight]:
        normalized = _normalize_user_id(user_id)
        stmt = select(NeuralInsightModel).where(NeuralInsightModel.user_id == normalized)
        if not include_read:
            stmt = stmt.where(NeuralInsightModel.is_read.is_(False))
        stmt = stmt.order_by(NeuralInsightModel.created_at.desc()).limit(limit)
        return [self._insight_to_domain(model) for model in session.execute(stmt).scalars()]

    def mark_read(self, session: Session, user_id: str, insight_id: str) -> StoredInsight:
        model = self._require_insight(session, user_id, insight_id)
        model.is_read = True
        session.flush()
        return self._insight_to_domain(model)

    def dismiss(self, session: Session, user_id: str, insight_id: str) -> StoredInsight:
        model = self._require_insight(session, user_id, insight_id)
        model.is_read = True
        model.action_taken = True
        session.flush()
        return self._insight_to_domain(model)

    def _find(self, session: Session, user_id: str) -> CognitiveTwinModel | None:
        normalized = _normalize_user_id(user_id)
        stmt = select(CognitiveTwinModel).where(CognitiveTwinModel.user_id == normalized)
        return session.execute(stmt).scalar_one_or_none()

    def _require_insight(self, session: Session, user_id: str, insight_id: str) -> NeuralInsightModel:
        normalized = _normalize_user_id(user_id)
        stmt = select(NeuralInsightModel).where(
            NeuralInsightModel.id == insight_id,
            NeuralInsightModel.user_id == normalized,
        )
        model = session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise LookupError(f"Insight '{insight_id}' was not found for user '{normalized}'.")
        return model

    @staticmethod
    def _apply_profile(model: CognitiveTwinModel, profile: CognitiveProfile) -> None:
        model.learning_style = profile.learning_style
        model.communication_preference = profile.communication_preference
        model.comprehension_score = profile.comprehension_score
        model.communication_score = profile.communication_score
        model.adaptability_score = profile.adaptability_score
        model.learning_velocity = profile.learning_velocity
        model.optimal_learning_hours = profile.optimal_learning_hours.model_dump()
        model.strengths = list(profile.strengths)
        model.areas_for_improvement = list(profile.areas_for_improvement)
        model.neural_patterns = profile.neural_patterns.model_dump()

    @staticmethod
    def _to_domain(model: CognitiveTwinModel) -> CognitiveProfile:
        record = {
            "learning_style": model.learning_style,
            "communication_preference": model.communication_preference,
            "comprehension_score": model.comprehension_score,
            "communication_score": model.communication_score,
            "adaptability_score": model.adaptability_score,
            "learning_velocity": model.learning_velocity,
            "optimal_learning_hours": model.optimal_learning_hours,
            "strengths": model.strengths,
            "areas_for_improvement": model.areas_for_improvement,
            "neural_patterns": model.neural_patterns,
        }
        return profile_from_record(model.user_id, record)

    @staticmethod
    def _insight_to_domain(model: NeuralInsightModel) -> StoredInsight:
        return StoredInsight(
            id=model.id,
            user_id=model.user_id,
            type=model.insight_type,
            title=model.title,
            description=model.description,
            priority=model.priority,
            actionable=model.is_actionable,
            is_read=model.is_read,
            action_taken=model.action_taken,
            metadata=dict(model.insight_metadata or {}),
            expires_at=model.expires_at,
            created_at=model.created_at,
        )


cognitive_twins = CognitiveTwinRepository()

__all__ = ["CognitiveTwinRepository", "StoredInsight", "cognitive_twins"]
