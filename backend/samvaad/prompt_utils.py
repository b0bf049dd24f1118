"""Utilities that build Samvaad system prompts from a cognitive twin profile."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Literal, Mapping, Union

from pydantic import BaseModel, Field, ValidationError

from .cognitive_profile import CognitiveProfile

PromptMode = Literal["learning", "advocacy", "general"]

LEARNING_STYLE_GUIDANCE: Dict[str, str] = {
    "Visual": "Use diagrams, charts, and visual metaphors extensively. Describe things in spatial terms.",
    "Auditory": "Use rhythmic explanations, mnemonics, and suggest reading aloud. Reference sounds and verbal patterns.",
    "Kinesthetic": "Use hands-on examples, physical metaphors, and action-oriented language. Suggest practice exercises.",
    "Reading/Writing": "Provide detailed written explanations, lists, and suggest note-taking. Use precise terminology.",
}

COMMUNICATION_GUIDANCE: Dict[str, str] = {
    "Professional": "Use formal language, clear structure, and business-appropriate tone",
    "Casual": "Use friendly, approachable language while maintaining respect",
    "Empathetic": "Lead with understanding, acknowledge emotions, use warm language",
    "Direct": "Be clear and concise, get to the point while remaining polite",
}

ADVOCACY_PRINCIPLES = (
    "Always maintain the user's dignity and represent their best interests",
    "Be culturally aware and adapt tone to the context",
    "Never be aggressive or confrontational - be assertive but respectful",
    "Provide clear, actionable communication",
    "When negotiating, find win-win solutions",
    "Acknowledge the other party's perspective while advocating for the user",
    "Use appropriate formality based on the situation",
    "If the user has social anxiety (comfort < 5), be extra supportive and confident on their behalf",
)

_VISUAL_CUES = re.compile(r"see|look|picture|diagram|chart|visual|show|image", re.IGNORECASE)
_ANXIETY_CUES = re.compile(r"nervous|worried|scared|anxious|afraid|unsure|help me", re.IGNORECASE)


class LearningContext(BaseModel):
    topic: str
    difficulty: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    previous_mistakes: List[str] = Field(default_factory=list)
    session_duration: float = 0
    engagement_level: float = 100


class AdvocacyContext(BaseModel):
    scenario: str
    recipient: str = ""
    cultural_context: str = ""
    formality_level: Literal["casual", "professional", "formal", "diplomatic"] = "professional"
    user_intent: str = ""
    emotional_state: Literal["calm", "anxious", "frustrated", "hopeful"] = "calm"
    constraints: List[str] = Field(default_factory=list)


def _fmt(value: float) -> str:
    return f"{value:g}"


def _numbered(rules: List[str]) -> List[str]:
    return [f"{index}. {rule}" for index, rule in enumerate(rules, start=1)]


def _labels(values: List[str]) -> str:
    return ", ".join(values) or "Not yet identified"


def learning_prompt(profile: CognitiveProfile) -> str:
    patterns = profile.neural_patterns
    rules: List[str] = []
    style_line = LEARNING_STYLE_GUIDANCE.get(profile.learning_style)
    if style_line:
        rules.append(style_line)
    rules.extend(
        [
            f"Adjust complexity based on comprehension score ({_fmt(profile.comprehension_score)}%)",
            "If learning velocity is below 1.0, slow down and provide more examples",
            f"Match explanation length to preference: {patterns.preferred_explanation_length}",
            f"Provide {patterns.feedback_response_type} feedback",
        ]
    )

    sections = [
        "You are a Cognitive Twin AI tutor named Samvaad. You have deeply analyzed and understood this learner's cognitive patterns.",
        "\n".join(
            [
                "LEARNER PROFILE:",
                f"- Learning Style: {profile.learning_style}",
                f"- Comprehension Level: {_fmt(profile.comprehension_score)}%",
                f"- Learning Velocity: {_fmt(profile.learning_velocity)}x (1.0 is average)",
                f"- Preferred Explanation Length: {patterns.preferred_explanation_length}",
                f"- Visual Learning Affinity: {_fmt(patterns.visual_learning_affinity)}/10",
                f"- Abstract Thinking: {_fmt(patterns.abstract_thinking_level)}/10",
                f"- Practical Application Preference: {_fmt(patterns.practical_application_preference)}/10",
                f"- Feedback Style Preference: {patterns.feedback_response_type}",
            ]
        ),
        "\n".join(["ADAPTATION RULES:", *_numbered(rules)]),
        "\n".join(
            [
                f"STRENGTHS TO LEVERAGE: {_labels(profile.strengths)}",
                f"AREAS TO SUPPORT: {_labels(profile.areas_for_improvement)}",
            ]
        ),
        "Remember: You are not just teaching - you are adapting to how this specific person learns best. "
        "Every response should feel personally crafted for them.",
    ]
    return "\n\n".join(sections)


def advocacy_prompt(profile: CognitiveProfile) -> str:
    patterns = profile.neural_patterns
    style_lines: List[str] = []
    guidance = COMMUNICATION_GUIDANCE.get(profile.communication_preference)
    if guidance:
        style_lines.append(f"- {guidance}")

    sections = [
        "You are Samvaad, an AI Advocate speaking on behalf of a user. Your role is to communicate their intent "
        "in a polite, culturally sensitive, and effective manner.",
        "\n".join(
            [
                "USER'S COMMUNICATION PROFILE:",
                f"- Preferred Style: {profile.communication_preference}",
                f"- Communication Score: {_fmt(profile.communication_score)}%",
                f"- Social Interaction Comfort: {_fmt(patterns.social_interaction_comfort)}/10",
                f"- Stress Response: {patterns.stress_response_pattern}",
            ]
        ),
        "\n".join(["ADVOCACY PRINCIPLES:", *_numbered(list(ADVOCACY_PRINCIPLES))]),
        "\n".join(["COMMUNICATION STYLE ADAPTATION:", *style_lines]),
        "You are the user's confident voice when they need support in communication.",
    ]
    return "\n\n".join(sections)


def general_prompt(profile: CognitiveProfile) -> str:
    sections = [
        "You are Samvaad, a Cognitive Twin AI assistant. You understand this user deeply and can help with both "
        "learning and advocacy.",
        "\n".join(
            [
                "USER PROFILE SUMMARY:",
                f"- Learning Style: {profile.learning_style}",
                f"- Communication Style: {profile.communication_preference}",
                f"- Overall Adaptability: {_fmt(profile.adaptability_score)}%",
            ]
        ),
        "\n".join(
            [
                "You can seamlessly switch between:",
                "1. LEARNING MODE: Helping the user understand concepts adapted to their learning style",
                "2. ADVOCACY MODE: Communicating on their behalf in various situations",
            ]
        ),
        "Always be supportive, adaptive, and focused on empowering the user. "
        "You amplify their capabilities, not replace their agency.",
    ]
    return "\n\n".join(sections)


_RENDERERS = {
    "learning": learning_prompt,
    "advocacy": advocacy_prompt,
    "general": general_prompt,
}


def render_system_prompt(mode: str, profile: CognitiveProfile) -> str:
    """Render the system prompt for ``mode``; unknown modes use the general prompt."""
    renderer = _RENDERERS.get(mode, general_prompt)
    return renderer(profile)


def append_additional_context(prompt: str, context: Mapping[str, Any] | None) -> str:
    if not context:
        return prompt
    payload = json.dumps(dict(context), indent=2, default=str)
    return f"{prompt}\n\nADDITIONAL CONTEXT:\n{payload}"


def adaptive_prompt_modifiers(
    profile: CognitiveProfile,
    context: Union[LearningContext, AdvocacyContext],
) -> str:
    """Situational instructions layered on top of the mode prompt."""
    modifiers: List[str] = []
    if isinstance(context, LearningContext):
        if context.previous_mistakes:
            modifiers.append(
                f"The user previously struggled with: {', '.join(context.previous_mistakes)}. Address these gaps."
            )
        if context.engagement_level < 50:
            modifiers.append("Engagement is low. Make the explanation more interactive and interesting.")
        if context.difficulty == "beginner" and profile.comprehension_score < 70:
            modifiers.append("Use simpler language and more examples. Break down complex concepts.")
    else:
        if context.emotional_state == "anxious":
            modifiers.append("The user is anxious. Be extra confident and reassuring in your advocacy.")
        if context.formality_level == "diplomatic":
            modifiers.append("This requires diplomatic language. Be extra careful with word choice.")
    return "\n".join(modifiers)


def context_modifiers(mode: str, profile: CognitiveProfile, context: Mapping[str, Any] | None) -> str:
    """Modifiers for a free-form request context that carries a learning or advocacy shape."""
    if not context:
        return ""
    model = {"learning": LearningContext, "advocacy": AdvocacyContext}.get(mode)
    if model is None:
        return ""
    try:
        parsed = model.model_validate(dict(context))
    except ValidationError:
        return ""
    return adaptive_prompt_modifiers(profile, parsed)


def analyze_message_patterns(message: str) -> Dict[str, Any]:
    """Single-message neural pattern hints (partial, keyed by NeuralPatterns field)."""
    patterns: Dict[str, Any] = {}
    length = len(message)
    if length < 50:
        patterns["preferred_explanation_length"] = "brief"
    elif length < 200:
        patterns["preferred_explanation_length"] = "moderate"
    else:
        patterns["preferred_explanation_length"] = "detailed"

    if _VISUAL_CUES.search(message):
        patterns["visual_learning_affinity"] = 8

    if _ANXIETY_CUES.search(message):
        patterns["stress_response_pattern"] = "anxious"
        patterns["social_interaction_comfort"] = 3
    return patterns


__all__ = [
    "AdvocacyContext",
    "LearningContext",
    "PromptMode",
    "adaptive_prompt_modifiers",
    "analyze_message_patterns",
    "append_additional_context",
    "context_modifiers",
    "render_system_prompt",
]
