from __future__ import annotations

import threading
from typing import List

import pytest

from samvaad.analysis_queue import AnalysisQueue
from samvaad.cognitive_profile import CognitiveProfile, default_profile
from samvaad.cognitive_twin_store import CognitiveTwinStore
from samvaad.learning_analytics import ChatMessage, SessionAnalysis, SessionRecord
from samvaad.telemetry import TelemetryEvent, recent_events, register_listener


class RecordingSink:
    def __init__(self) -> None:
        self.calls: List[tuple[str, SessionAnalysis]] = []

    def record_analysis(self, user_id: str, analysis: SessionAnalysis) -> CognitiveProfile:
        self.calls.append((user_id, analysis))
        return default_profile(user_id)


class FailingSink:
    def record_analysis(self, user_id: str, analysis: SessionAnalysis) -> CognitiveProfile:
        raise RuntimeError("database unavailable")


def _session() -> SessionRecord:
    return SessionRecord(
        messages=[ChatMessage(role="user", content="Can you show me a diagram?")],
        duration_minutes=12,
    )


def test_completed_job_resolves_future_and_emits_event() -> None:
    sink = RecordingSink()
    queue = AnalysisQueue(sink, num_workers=1)
    try:
        job = queue.submit("asha", _session(), default_profile("asha"))
        analysis = job.future.result(timeout=5)
        assert queue.wait_for_idle(timeout=5)
    finally:
        queue.shutdown()

    assert sink.calls == [("asha", analysis)]
    (event,) = recent_events("analysis_completed")
    assert event.payload["job_id"] == job.job_id
    assert event.payload["insight_count"] == len(analysis.insights)
    assert queue.stats()["completed"] == 1


def test_failed_job_is_observable() -> None:
    seen: List[TelemetryEvent] = []
    delivered = threading.Event()

    def listener(event: TelemetryEvent) -> None:
        if event.name == "analysis_failed":
            seen.append(event)
            delivered.set()

    register_listener(listener)
    queue = AnalysisQueue(FailingSink(), num_workers=1)
    try:
        job = queue.submit("asha", _session(), default_profile("asha"))
        with pytest.raises(RuntimeError, match="database unavailable"):
            job.future.result(timeout=5)
        assert delivered.wait(timeout=5)
    finally:
        queue.shutdown()

    assert seen[0].payload["user_id"] == "asha"
    assert seen[0].payload["error"] == "RuntimeError: database unavailable"
    assert queue.stats()["failed"] == 1


def test_submitted_profile_is_snapshotted() -> None:
    sink = RecordingSink()
    queue = AnalysisQueue(sink, num_workers=1)
    profile = default_profile("asha")
    try:
        job = queue.submit("asha", _session(), profile)
        profile.strengths.append("mutated after submit")
        job.future.result(timeout=5)
    finally:
        queue.shutdown()
    assert job.profile.strengths == []


def test_submit_after_shutdown_raises() -> None:
    queue = AnalysisQueue(RecordingSink(), num_workers=1)
    queue.shutdown()
    with pytest.raises(RuntimeError):
        queue.submit("asha", _session(), default_profile("asha"))


@pytest.mark.usefixtures("database")
def test_queue_persists_into_store() -> None:
    store = CognitiveTwinStore()
    queue = AnalysisQueue(store, num_workers=1)
    try:
        jobs = [queue.submit("asha", _session(), default_profile("asha")) for _ in range(3)]
        for job in jobs:
            job.future.result(timeout=10)
    finally:
        queue.shutdown()

    titles = [insight.title for insight in store.list_insights("asha")]
    assert titles.count("Great Learning Session!") == 3
