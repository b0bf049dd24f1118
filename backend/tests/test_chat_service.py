from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
from openai import OpenAIError

from samvaad.chat_service import EMPTY_REPLY, FALLBACK_NOTE, ChatProviderError, ChatService, fallback_response
from samvaad.cognitive_profile import default_profile
from samvaad.config import Settings
from samvaad.learning_analytics import ChatMessage


class FakeCompletions:
    def __init__(self, content: Any = "Here is a diagram.", error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.content is None:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def _client(completions: FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {"AZURE_OPENAI_DEPLOYMENT": "samvaad-gpt"}
    values.update(overrides)
    return Settings(**values)


def test_respond_sends_rendered_prompt_and_history() -> None:
    completions = FakeCompletions()
    service = ChatService(_settings(), client=_client(completions))
    messages = [ChatMessage(role="user", content="Explain fractions")]

    reply = service.respond("learning", messages, default_profile("asha"), {"topic": "Fractions"})

    assert reply.message == "Here is a diagram."
    assert reply.used_provider
    request = completions.requests[0]
    assert request["model"] == "samvaad-gpt"
    assert request["temperature"] == 0.7
    assert request["max_tokens"] == 1000
    system, user = request["messages"]
    assert system["role"] == "system"
    assert "Cognitive Twin AI tutor" in system["content"]
    assert '"topic": "Fractions"' in system["content"]
    assert user == {"role": "user", "content": "Explain fractions"}


def test_empty_provider_reply_uses_apology() -> None:
    service = ChatService(_settings(), client=_client(FakeCompletions(content=None)))
    assert service.complete("system", []) == EMPTY_REPLY
    service = ChatService(_settings(), client=_client(FakeCompletions(content="")))
    assert service.complete("system", []) == EMPTY_REPLY


def test_provider_error_is_wrapped() -> None:
    service = ChatService(_settings(), client=_client(FakeCompletions(error=OpenAIError("rate limited"))))
    with pytest.raises(ChatProviderError, match="rate limited"):
        service.respond("general", [], default_profile("asha"))


def test_unconfigured_service_falls_back() -> None:
    service = ChatService(_settings())
    assert not service.configured

    reply = service.respond("learning", [ChatMessage(role="user", content="How do magnets work?")], default_profile("asha"))
    assert not reply.used_provider
    assert reply.note == FALLBACK_NOTE
    assert "visual representations" in reply.message


def test_configured_settings_build_azure_client() -> None:
    settings = _settings(AZURE_OPENAI_ENDPOINT="https://example.openai.azure.com", AZURE_OPENAI_API_KEY="key")
    assert settings.chat_provider_configured
    assert ChatService(settings).configured


@pytest.mark.parametrize(
    ("mode", "text", "expected"),
    [
        ("learning", "hello", "comprehension score of 75%"),
        ("advocacy", "please help me negotiate", "Professional in tone"),
        ("advocacy", "hello", "fee extension, salary negotiation"),
        ("general", "hello", "visual learning style"),
    ],
)
def test_fallback_response_by_mode(mode: str, text: str, expected: str) -> None:
    messages = [ChatMessage(role="user", content=text)]
    assert expected in fallback_response(messages, mode, default_profile("asha"))


def test_learning_context_adds_modifiers_to_system_prompt() -> None:
    completions = FakeCompletions()
    service = ChatService(_settings(), client=_client(completions))
    context = {"topic": "Fractions", "previous_mistakes": ["common denominators"], "engagement_level": 20}

    service.respond("learning", [], default_profile("asha"), context)

    system = completions.requests[0]["messages"][0]["content"]
    assert "previously struggled with: common denominators" in system
    assert system.index("Engagement is low") < system.index("ADDITIONAL CONTEXT:")
