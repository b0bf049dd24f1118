"""HTTP surface tests for chat, advocacy templates, and cognitive twin endpoints."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Iterator, List

import pytest
from fastapi.testclient import TestClient

from samvaad.analysis_queue import AnalysisQueue
from samvaad.chat_service import ChatProviderError, ChatService
from samvaad.cognitive_twin_store import CognitiveTwinStore
from samvaad.config import Settings
from samvaad.dependencies import get_chat_service
from samvaad.learning_analytics import LearningInsight
from samvaad.main import app
from samvaad.telemetry import recent_events


class StubCompletions:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    def create(self, **_: Any) -> SimpleNamespace:
        if self.error is not None:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="Adapted reply"))])


class BrokenService(ChatService):
    def respond(self, *args: Any, **kwargs: Any):  # type: ignore[override]
        raise ChatProviderError("upstream 500")


def _provider_service() -> ChatService:
    client = SimpleNamespace(chat=SimpleNamespace(completions=StubCompletions()))
    return ChatService(Settings(), client=client)


@pytest.fixture
def client(database: None) -> Iterator[TestClient]:
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_healthz(client: TestClient) -> None:
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_database_health(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    assert client.get("/healthz/database").json() == {"status": "ok"}

    def missing_engine():
        raise RuntimeError("SAMVAAD_DATABASE_URL must be configured")

    monkeypatch.setattr("samvaad.main.get_engine", missing_engine)
    response = client.get("/healthz/database")
    assert response.status_code == 503
    assert "SAMVAAD_DATABASE_URL" in response.json()["detail"]


def test_chat_fallback_without_provider(client: TestClient) -> None:
    app.dependency_overrides[get_chat_service] = lambda: ChatService(Settings())
    response = client.post(
        "/api/chat",
        json={"user_id": "asha", "mode": "general", "messages": [{"role": "user", "content": "hi"}]},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["mode"] == "general"
    assert payload["profile"] == {"learning_style": "Visual", "communication_preference": "Professional"}
    assert "note" in payload
    assert "analysis_job_id" not in payload


def test_learning_chat_schedules_analysis(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    queue = AnalysisQueue(CognitiveTwinStore(), num_workers=1)
    monkeypatch.setattr("samvaad.chat_routes.get_queue", lambda: queue)
    app.dependency_overrides[get_chat_service] = _provider_service
    try:
        response = client.post(
            "/api/chat",
            json={
                "user_id": "asha",
                "mode": "learning",
                "messages": [{"role": "user", "content": f"question {index}?"} for index in range(6)],
                "context": {"topic": "Fractions", "duration_minutes": 15},
            },
        )
        assert response.status_code == 200
        payload = response.json()
        assert payload["message"] == "Adapted reply"
        assert payload["analysis_job_id"].startswith("analysis_")
        assert queue.wait_for_idle(timeout=10)
    finally:
        queue.shutdown()

    profile = client.get("/api/cognitive-twin/asha").json()
    assert "Curiosity and inquiry" in profile["strengths"]
    insights = client.get("/api/cognitive-twin/asha/insights").json()["insights"]
    assert any(insight["title"] == "Great Learning Session!" for insight in insights)


def test_chat_provider_failure_returns_502(client: TestClient) -> None:
    app.dependency_overrides[get_chat_service] = lambda: BrokenService(Settings())
    response = client.post("/api/chat", json={"user_id": "asha", "messages": []})
    assert response.status_code == 502
    assert response.json()["detail"] == "AI service error"


def test_learning_chat_survives_malformed_context(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    queue = AnalysisQueue(CognitiveTwinStore(), num_workers=1)
    monkeypatch.setattr("samvaad.chat_routes.get_queue", lambda: queue)
    app.dependency_overrides[get_chat_service] = _provider_service
    try:
        response = client.post(
            "/api/chat",
            json={
                "user_id": "asha",
                "mode": "learning",
                "messages": [{"role": "user", "content": "What is a fraction?"}],
                "context": {"response_times": 5, "duration_minutes": "long"},
            },
        )
        assert queue.wait_for_idle(timeout=10)
    finally:
        queue.shutdown()

    assert response.status_code == 200
    assert response.json()["message"] == "Adapted reply"
    assert "analysis_job_id" in response.json()


def test_learning_chat_reply_kept_when_scheduling_fails(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def unavailable_queue():
        raise RuntimeError("queue offline")

    monkeypatch.setattr("samvaad.chat_routes.get_queue", unavailable_queue)
    app.dependency_overrides[get_chat_service] = _provider_service
    response = client.post(
        "/api/chat",
        json={"user_id": "asha", "mode": "learning", "messages": [{"role": "user", "content": "hi"}]},
    )

    assert response.status_code == 200
    assert "analysis_job_id" not in response.json()
    (event,) = recent_events("analysis_failed")
    assert event.payload["user_id"] == "asha"
    assert event.payload["error"] == "RuntimeError: queue offline"


def test_blank_user_id_rejected(client: TestClient) -> None:
    assert client.get("/api/cognitive-twin/%20").status_code == 422
    assert client.get("/api/cognitive-twin/%20/insights").status_code == 422
    response = client.post("/api/chat", json={"user_id": "   ", "messages": []})
    assert response.status_code == 422


def test_user_id_is_stripped(client: TestClient) -> None:
    client.put("/api/cognitive-twin/%20ravi%20/preferences", json={"learning_style": "Auditory"})
    assert client.get("/api/cognitive-twin/ravi").json()["learning_style"] == "Auditory"


def test_chat_rejects_unknown_mode(client: TestClient) -> None:
    response = client.post("/api/chat", json={"user_id": "asha", "mode": "poetry", "messages": []})
    assert response.status_code == 422


def test_list_and_search_templates(client: TestClient) -> None:
    all_templates = client.get("/api/advocacy/templates").json()["templates"]
    assert len(all_templates) == 8
    assert "keywords" not in all_templates[0]

    financial = client.get("/api/advocacy/templates", params={"category": "financial"}).json()["templates"]
    assert [template["id"] for template in financial] == ["fee_extension"]

    searched = client.get(
        "/api/advocacy/templates", params={"category": "financial", "search": "salary raise"}
    ).json()["templates"]
    assert "salary_negotiation" in [template["id"] for template in searched]


def test_fill_template_endpoint(client: TestClient) -> None:
    response = client.post(
        "/api/advocacy/templates",
        json={"template_id": "fee_extension", "values": {"recipient": "Registrar"}},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["template"] == "Fee Extension Request"
    assert payload["content"].startswith("Dear Registrar,")
    assert "[due_date]" in payload["content"]
    assert payload["tips"]


def test_unknown_template_is_404(client: TestClient) -> None:
    assert client.get("/api/advocacy/templates/nope").status_code == 404
    response = client.post("/api/advocacy/templates", json={"template_id": "nope", "values": {}})
    assert response.status_code == 404
    assert response.json()["detail"] == "Template not found"


def test_profile_defaults_and_preferences(client: TestClient) -> None:
    profile = client.get("/api/cognitive-twin/ravi").json()
    assert profile["learning_style"] == "Visual"
    assert profile["neural_patterns"]["visual_learning_affinity"] == 7

    updated = client.put(
        "/api/cognitive-twin/ravi/preferences",
        json={"learning_style": "Auditory", "communication_preference": "Direct"},
    ).json()
    assert updated["learning_style"] == "Auditory"
    assert client.get("/api/cognitive-twin/ravi").json()["communication_preference"] == "Direct"

    invalid = client.put("/api/cognitive-twin/ravi/preferences", json={"learning_style": "Telepathic"})
    assert invalid.status_code == 422


def test_analyze_endpoint_and_insight_actions(client: TestClient) -> None:
    response = client.post(
        "/api/cognitive-twin/ravi/analyze",
        json={
            "messages": [{"role": "user", "content": "a"}, {"role": "user", "content": "b"}],
            "duration_minutes": 30,
            "topic": "Algebra",
            "mistakes": ["math slip", "concept gap"],
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert 0 <= body["analysis"]["engagement_score"] <= 100
    assert body["profile"]["areas_for_improvement"] == ["Numerical accuracy", "Conceptual understanding"]

    insights: List[dict] = client.get("/api/cognitive-twin/ravi/insights").json()["insights"]
    warning = next(insight for insight in insights if insight["type"] == "warning")
    dismissed = client.post(f"/api/cognitive-twin/ravi/insights/{warning['id']}/dismiss").json()
    assert dismissed["action_taken"] is True

    remaining = client.get("/api/cognitive-twin/ravi/insights").json()["insights"]
    assert warning["id"] not in [insight["id"] for insight in remaining]
    assert client.post("/api/cognitive-twin/ravi/insights/missing/read").status_code == 404


def test_store_insights_visible_over_http(client: TestClient) -> None:
    store = CognitiveTwinStore()
    (stored,) = store.add_insights(
        "meena",
        [LearningInsight(type="recommendation", title="Try flashcards", description="d", priority="medium", actionable=True)],
    )
    read = client.post(f"/api/cognitive-twin/meena/insights/{stored.id}/read").json()
    assert read["is_read"] is True
    assert client.get("/api/cognitive-twin/meena/insights", params={"include_read": True}).json()["insights"]
