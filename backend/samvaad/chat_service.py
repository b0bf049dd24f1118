"""Chat completion client and mode-aware reply orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from openai import AzureOpenAI, OpenAIError

from .cognitive_profile import CognitiveProfile
from .config import Settings
from .learning_analytics import ChatMessage
from .prompt_utils import append_additional_context, context_modifiers, render_system_prompt

logger = logging.getLogger(__name__)

EMPTY_REPLY = "I apologize, but I could not generate a response."
FALLBACK_NOTE = (
    "Using fallback mode. Configure AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY for full AI capabilities."
)

_STYLE_CHANNELS = {
    "Visual": "visual representations",
    "Auditory": "verbal explanations",
    "Kinesthetic": "hands-on practice",
}


class ChatProviderError(RuntimeError):
    """Raised when the chat completion provider fails or rejects a request."""


@dataclass
class ChatReply:
    message: str
    used_provider: bool
    note: Optional[str] = None


class ChatService:
    """Wraps the Azure OpenAI deployment configured in ``Settings``."""

    def __init__(self, settings: Settings, client: Any = None) -> None:
        self._settings = settings
        self._client = client
        if self._client is None and settings.chat_provider_configured:
            self._client = AzureOpenAI(
                azure_endpoint=settings.azure_openai_endpoint,
                api_key=settings.azure_openai_api_key,
                api_version=settings.azure_openai_api_version,
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        if self._client is None:
            raise ChatProviderError("Chat provider is not configured.")
        payload: List[Dict[str, str]] = [{"role": "system", "content": system_prompt}]
        payload.extend({"role": message.role, "content": message.content} for message in messages)
        try:
            response = self._client.chat.completions.create(
                model=self._settings.azure_openai_deployment,
                messages=payload,
                temperature=self._settings.chat_temperature,
                max_tokens=self._settings.chat_max_tokens,
                stream=False,
            )
        except OpenAIError as exc:
            logger.error("Chat completion failed: %s", exc)
            raise ChatProviderError(str(exc)) from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            return EMPTY_REPLY
        content = getattr(choices[0].message, "content", None)
        return content or EMPTY_REPLY

    def respond(
        self,
        mode: str,
        messages: Sequence[ChatMessage],
        profile: CognitiveProfile,
        context: Optional[Mapping[str, Any]] = None,
    ) -> ChatReply:
        system_prompt = render_system_prompt(mode, profile)
        modifiers = context_modifiers(mode, profile, context)
        if modifiers:
            system_prompt = f"{system_prompt}\n\n{modifiers}"
        system_prompt = append_additional_context(system_prompt, context)
        if not self.configured:
            return ChatReply(
                message=fallback_response(messages, mode, profile),
                used_provider=False,
                note=FALLBACK_NOTE,
            )
        return ChatReply(message=self.complete(system_prompt, messages), used_provider=True)


def fallback_response(messages: Sequence[ChatMessage], mode: str, profile: CognitiveProfile) -> str:
    """Canned, profile-aware replies used when no provider is configured."""
    last_message = messages[-1].content.lower() if messages else ""
    style = profile.learning_style.lower()

    if mode == "learning":
        if any(cue in last_message for cue in ("explain", "what is", "how")):
            channel = _STYLE_CHANNELS.get(profile.learning_style, "reading and writing")
            return (
                f"I'd love to help you understand this concept! Based on your {style} learning style, "
                "let me break this down for you:\n\n"
                f"Since you learn best through {channel}, I'll adapt my explanation accordingly.\n\n"
                "To provide you with the most helpful response, please configure the Azure OpenAI API keys in your "
                "environment. This will enable me to give you personalized, detailed explanations tailored to your "
                "unique cognitive patterns."
            )
        return (
            f"I'm your Cognitive Twin, ready to help you learn! Your profile shows you're a {style} learner with a "
            f"comprehension score of {profile.comprehension_score:g}%. What would you like to explore today? "
            "I'll adapt my teaching style to match how you learn best."
        )

    if mode == "advocacy":
        if any(cue in last_message for cue in ("help", "negotiate", "request")):
            return (
                "I understand you need help communicating something important. As your AI advocate, I'll help you "
                "craft a message that's:\n\n"
                f"• {profile.communication_preference} in tone\n"
                "• Culturally sensitive and respectful\n"
                "• Clear and effective\n\n"
                "Please tell me more about the situation:\n"
                "1. Who are you communicating with?\n"
                "2. What outcome are you hoping for?\n"
                "3. Any specific concerns or constraints?\n\n"
                "With this information, I can help you draft the perfect message."
            )
        return (
            "I'm here to advocate on your behalf. Whether you need help with a fee extension, salary negotiation, "
            "complaint resolution, or any other communication challenge, I'll help you express yourself confidently "
            "and effectively. What situation can I help you with today?"
        )

    return (
        "Hello! I'm Samvaad, your Cognitive Twin. I can help you in two ways:\n\n"
        f"**Learning Mode**: I'll teach you concepts adapted to your {style} learning style.\n\n"
        "**Advocacy Mode**: I'll help you communicate effectively in challenging situations.\n\n"
        "How can I assist you today?"
    )


__all__ = [
    "ChatProviderError",
    "ChatReply",
    "ChatService",
    "fallback_response",
]
