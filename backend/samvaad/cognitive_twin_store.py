"""Transactional facade over the cognitive twin repository."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .cognitive_profile import CognitiveProfile, ProfileUpdate, default_profile
from .db.session import session_scope
from .learning_analytics import LearningInsight, SessionAnalysis
from .repositories.cognitive_twins import CognitiveTwinRepository, StoredInsight, cognitive_twins

logger = logging.getLogger(__name__)


class CognitiveTwinStore:
    """Each call runs in its own ``session_scope`` transaction."""

    def __init__(self, repository: Optional[CognitiveTwinRepository] = None) -> None:
        self._repo = repository or cognitive_twins

    def get(self, user_id: str) -> Optional[CognitiveProfile]:
        with session_scope(commit=False) as session:
            return self._repo.get(session, user_id)

    def get_or_default(self, user_id: str) -> CognitiveProfile:
        return self.get(user_id) or default_profile(user_id)

    def upsert(self, user_id: str, update: ProfileUpdate) -> CognitiveProfile:
        with session_scope() as session:
            return self._repo.upsert(session, user_id, update)

    def save_profile(self, profile: CognitiveProfile) -> CognitiveProfile:
        with session_scope() as session:
            return self._repo.save_profile(session, profile)

    def record_analysis(self, user_id: str, analysis: SessionAnalysis) -> CognitiveProfile:
        """Persist the profile update and insights of one analysis run atomically."""
        with session_scope() as session:
            profile = self._repo.upsert(session, user_id, analysis.profile_updates)
            stored = self._repo.add_insights(session, user_id, analysis.insights)
        logger.info(
            "Recorded analysis for user=%s insights=%d comprehension=%.1f",
            user_id,
            len(stored),
            analysis.comprehension_score,
        )
        return profile

    def add_insights(self, user_id: str, insights: Iterable[LearningInsight]) -> List[StoredInsight]:
        with session_scope() as session:
            return self._repo.add_insights(session, user_id, insights)

    def list_insights(self, user_id: str, *, include_read: bool = False, limit: int = 50) -> List[StoredInsight]:
        with session_scope(commit=False) as session:
            return self._repo.list_insights(session, user_id, include_read=include_read, limit=limit)

    def mark_read(self, user_id: str, insight_id: str) -> StoredInsight:
        with session_scope() as session:
            return self._repo.mark_read(session, user_id, insight_id)

    def dismiss(self, user_id: str, insight_id: str) -> StoredInsight:
        with session_scope() as session:
            return self._repo.dismiss(session, user_id, insight_id)

    def delete(self, user_id: str) -> bool:
        with session_scope() as session:
            return self._repo.delete(session, user_id)


twin_store = CognitiveTwinStore()

__all__ = ["CognitiveTwinStore", "twin_store"]
