"""Persistence tests for cognitive twins and neural insights."""

from __future__ import annotations

import pytest

from samvaad.cognitive_profile import ProfileUpdate, default_profile
from samvaad.cognitive_twin_store import CognitiveTwinStore
from samvaad.db.models import CognitiveTwinModel
from samvaad.db.session import session_scope
from samvaad.learning_analytics import LearningAnalyticsEngine, LearningInsight, SessionRecord, ChatMessage

pytestmark = pytest.mark.usefixtures("database")


def _insight(title: str, priority: str = "low") -> LearningInsight:
    return LearningInsight(
        type="achievement",
        title=title,
        description=f"{title} description",
        priority=priority,  # type: ignore[arg-type]
        actionable=False,
    )


def test_missing_profile_returns_default() -> None:
    store = CognitiveTwinStore()
    assert store.get("nobody") is None
    assert store.get_or_default("nobody") == default_profile("nobody")


def test_upsert_creates_then_merges() -> None:
    store = CognitiveTwinStore()
    created = store.upsert("asha", ProfileUpdate(comprehension_score=81, strengths=["Focus"]))
    assert created.comprehension_score == 81
    assert created.adaptability_score == 80

    merged = store.upsert("asha", ProfileUpdate(strengths=["Focus", "Memory"], learning_velocity=1.2))
    assert merged.strengths == ["Focus", "Memory"]
    assert merged.learning_velocity == pytest.approx(1.2)
    assert merged.comprehension_score == 81
    assert store.get("asha") == merged


def test_save_profile_replaces_declared_preferences() -> None:
    store = CognitiveTwinStore()
    profile = default_profile("asha").model_copy(update={"learning_style": "Kinesthetic"})
    saved = store.save_profile(profile)
    assert saved.learning_style == "Kinesthetic"
    assert store.get_or_default("asha").learning_style == "Kinesthetic"


def test_zero_score_row_loads_as_default() -> None:
    store = CognitiveTwinStore()
    store.upsert("asha", ProfileUpdate())
    with session_scope() as session:
        row = session.query(CognitiveTwinModel).filter_by(user_id="asha").one()
        row.comprehension_score = 0
    assert store.get_or_default("asha").comprehension_score == 75


def test_record_analysis_persists_profile_and_insights() -> None:
    store = CognitiveTwinStore()
    session = SessionRecord(
        messages=[ChatMessage(role="user", content=f"message {index}") for index in range(6)],
        duration_minutes=20,
        topic="Fractions",
    )
    analysis = LearningAnalyticsEngine().analyze(session, default_profile("asha"))
    profile = store.record_analysis("asha", analysis)

    assert "Accuracy and attention to detail" in profile.strengths
    insights = store.list_insights("asha")
    assert [insight.title for insight in insights] == ["Great Learning Session!"]
    assert not insights[0].is_read


def test_insight_read_and_dismiss_lifecycle() -> None:
    store = CognitiveTwinStore()
    first, second = store.add_insights("asha", [_insight("First"), _insight("Second", "high")])

    read = store.mark_read("asha", first.id)
    assert read.is_read and not read.action_taken
    assert [insight.id for insight in store.list_insights("asha")] == [second.id]

    dismissed = store.dismiss("asha", second.id)
    assert dismissed.is_read and dismissed.action_taken
    assert store.list_insights("asha") == []
    assert len(store.list_insights("asha", include_read=True)) == 2


def test_insights_scoped_to_owner() -> None:
    store = CognitiveTwinStore()
    (insight,) = store.add_insights("asha", [_insight("Mine")])
    with pytest.raises(LookupError):
        store.mark_read("ravi", insight.id)


def test_delete_removes_profile_and_insights() -> None:
    store = CognitiveTwinStore()
    store.upsert("asha", ProfileUpdate(comprehension_score=90))
    store.add_insights("asha", [_insight("Gone")])

    assert store.delete("asha") is True
    assert store.get("asha") is None
    assert store.list_insights("asha", include_read=True) == []
    assert store.delete("asha") is False


def test_blank_user_id_rejected() -> None:
    with pytest.raises(ValueError):
        CognitiveTwinStore().upsert("   ", ProfileUpdate())
