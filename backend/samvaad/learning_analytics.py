"""Rule-based session analyzer that adapts a learner's cognitive twin.

The heuristics here are fixed constants rather than fitted values; they are
kept stable so analysis runs are reproducible across releases.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from .cognitive_profile import (
    AFFINITY_RANGE,
    SCORE_RANGE,
    VELOCITY_RANGE,
    CognitiveProfile,
    NeuralPatterns,
    OptimalLearningHours,
    ProfileUpdate,
    clamp,
    merge_unique,
)

logger = logging.getLogger(__name__)

InsightType = Literal["pattern", "recommendation", "achievement", "warning"]
InsightPriority = Literal["low", "medium", "high"]
Difficulty = Literal["beginner", "intermediate", "advanced"]

STYLE_SIGNAL_THRESHOLD = 0.3
MISTAKE_RATE_WARNING = 0.2
AFFINITY_NUDGE = 0.5
DEFAULT_AFFINITY = 5.0
VELOCITY_STEP = 0.05
ACHIEVEMENT_MIN_MINUTES = 10

STYLE_CUES: Dict[str, re.Pattern[str]] = {
    "visual": re.compile(r"see|look|picture|diagram|chart|visual|show|image|color|shape", re.IGNORECASE),
    "auditory": re.compile(r"hear|sound|tell|explain|discuss|talk|listen", re.IGNORECASE),
    "practical": re.compile(r"example|practice|try|do|use|apply|real|actual", re.IGNORECASE),
    "reading": re.compile(r"read|write|list|notes|document|text|book", re.IGNORECASE),
}

# Only these signals have a matching affinity score on the profile.
AFFINITY_FIELDS: Dict[str, str] = {
    "visual": "visual_learning_affinity",
    "practical": "practical_application_preference",
}

MISTAKE_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Numerical accuracy", ("calculation", "math")),
    ("Language precision", ("grammar", "syntax")),
    ("Conceptual understanding", ("concept", "understand")),
)

CLARIFICATION_PHRASES = ("what do you mean", "can you explain", "i don't understand")


class ChatMessage(BaseModel):
    role: str
    content: str


class EngagementMetrics(BaseModel):
    response_times_ms: List[float] = Field(default_factory=list)
    question_count: int = Field(default=0, ge=0)
    clarification_requests: int = Field(default=0, ge=0)


class SessionRecord(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)
    duration_minutes: float = Field(default=0, ge=0)
    topic: str = "General Learning"
    difficulty: Difficulty = "intermediate"
    mistakes: List[str] = Field(default_factory=list)
    corrections: List[str] = Field(default_factory=list)
    engagement_metrics: EngagementMetrics = Field(default_factory=EngagementMetrics)


class LearningInsight(BaseModel):
    type: InsightType
    title: str
    description: str
    priority: InsightPriority
    actionable: bool
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SessionAnalysis(BaseModel):
    profile_updates: ProfileUpdate
    insights: List[LearningInsight] = Field(default_factory=list)
    comprehension_score: float
    engagement_score: float
    detected_signals: List[str] = Field(default_factory=list)


def session_from_chat(
    messages: Sequence[ChatMessage],
    context: Optional[Mapping[str, Any]] = None,
    *,
    duration_minutes: float = 0,
) -> SessionRecord:
    """Build a session record from a chat exchange and its optional client context."""
    ctx: Mapping[str, Any] = context or {}
    user_texts = [message.content for message in messages if message.role == "user"]
    question_count = sum(1 for text in user_texts if "?" in text)
    clarifications = sum(
        1 for text in user_texts if any(phrase in text.lower() for phrase in CLARIFICATION_PHRASES)
    )
    difficulty = ctx.get("difficulty")
    if difficulty not in ("beginner", "intermediate", "advanced"):
        difficulty = "intermediate"
    return SessionRecord(
        messages=list(messages),
        duration_minutes=duration_minutes,
        topic=str(ctx.get("topic") or "General Learning"),
        difficulty=difficulty,
        mistakes=_string_list(ctx.get("mistakes")),
        corrections=_string_list(ctx.get("corrections")),
        engagement_metrics=EngagementMetrics(
            response_times_ms=_number_list(_first_present(ctx, "response_times", "responseTimes")),
            question_count=question_count,
            clarification_requests=clarifications,
        ),
    )


def _first_present(ctx: Mapping[str, Any], *keys: str) -> Any:
    # Web clients send camelCase keys.
    for key in keys:
        if ctx.get(key) is not None:
            return ctx[key]
    return None


def _number_list(value: Any) -> List[float]:
    if not isinstance(value, (list, tuple)):
        return []
    return [
        float(item)
        for item in value
        if isinstance(item, (int, float)) and not isinstance(item, bool) and math.isfinite(item)
    ]


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if isinstance(item, str) and item.strip()]


class LearningAnalyticsEngine:
    """Pure, synchronous analyzer; one call per completed session."""

    def analyze(self, session: SessionRecord, profile: CognitiveProfile) -> SessionAnalysis:
        engagement = self.engagement_score(session.engagement_metrics)
        comprehension = self.comprehension_score(session, profile.comprehension_score)
        signals = self.detect_style_signals(session.messages)

        insights: List[LearningInsight] = []
        insights.extend(self._session_insights(signals, session, profile))

        update = ProfileUpdate(comprehension_score=comprehension)

        adjustment = self.velocity_adjustment(engagement, comprehension)
        if adjustment != 0:
            update.learning_velocity = clamp(profile.learning_velocity + adjustment, VELOCITY_RANGE)

        hours = self.detect_optimal_learning_hours(session)
        if hours is not None:
            update.optimal_learning_hours = hours
            insights.append(
                LearningInsight(
                    type="pattern",
                    title="Optimal Learning Time Detected",
                    description=(
                        f"Your cognitive twin noticed you perform best between {hours.start}:00 and "
                        f"{hours.end}:00. Consider scheduling important learning sessions during this window."
                    ),
                    priority="medium",
                    actionable=True,
                    metadata={"optimal_hours": hours.model_dump()},
                )
            )

        if session.mistakes:
            update.areas_for_improvement = merge_unique(
                profile.areas_for_improvement, self.classify_mistakes(session.mistakes)
            )

        strengths = self.detect_strengths(session)
        if strengths:
            update.strengths = merge_unique(profile.strengths, strengths)

        update.neural_patterns = self._updated_neural_patterns(profile.neural_patterns, session, signals)

        logger.debug(
            "Analyzed session topic=%s engagement=%.1f comprehension=%.1f insights=%d",
            session.topic,
            engagement,
            comprehension,
            len(insights),
        )
        return SessionAnalysis(
            profile_updates=update,
            insights=insights,
            comprehension_score=comprehension,
            engagement_score=engagement,
            detected_signals=sorted(signals),
        )

    @staticmethod
    def engagement_score(metrics: EngagementMetrics) -> float:
        score = 50.0
        if metrics.response_times_ms:
            average = sum(metrics.response_times_ms) / len(metrics.response_times_ms)
            score += max(0.0, 30 - average / 1000)
        score += min(30, metrics.question_count * 5)
        score += min(20, metrics.clarification_requests * 3)
        return clamp(score, SCORE_RANGE)

    @staticmethod
    def comprehension_score(session: SessionRecord, current_score: float) -> float:
        score = float(current_score)
        mistakes = len(session.mistakes)
        score -= min(10, mistakes * 2)
        score += min(5, len(session.corrections))

        questions = session.engagement_metrics.question_count
        if questions > 0 and questions / max(1, mistakes) > 2:
            score += 3
        return clamp(score, SCORE_RANGE)

    @staticmethod
    def detect_style_signals(messages: Sequence[ChatMessage]) -> set[str]:
        """Return the cue categories present in more than 30% of messages."""
        detected: set[str] = set()
        if not messages:
            return detected
        threshold = len(messages) * STYLE_SIGNAL_THRESHOLD
        for category, pattern in STYLE_CUES.items():
            hits = sum(1 for message in messages if pattern.search(message.content))
            if hits > threshold:
                detected.add(category)
        return detected

    @staticmethod
    def velocity_adjustment(engagement: float, comprehension: float) -> float:
        performance = (engagement + comprehension) / 2
        if performance > 80:
            return VELOCITY_STEP
        if performance < 60:
            return -VELOCITY_STEP
        return 0.0

    @staticmethod
    def explanation_length(messages: Sequence[ChatMessage]) -> str:
        average = (
            sum(len(message.content) for message in messages) / len(messages) if messages else 0
        )
        if average < 50:
            return "brief"
        if average < 200:
            return "moderate"
        return "detailed"

    @staticmethod
    def classify_mistakes(mistakes: Sequence[str]) -> List[str]:
        text = " ".join(mistakes).lower()
        return [
            label
            for label, keywords in MISTAKE_CATEGORIES
            if any(keyword in text for keyword in keywords)
        ]

    @staticmethod
    def detect_strengths(session: SessionRecord) -> List[str]:
        strengths: List[str] = []
        mistakes = len(session.mistakes)
        if len(session.corrections) > mistakes:
            strengths.append("Self-correction ability")
        if session.engagement_metrics.question_count > 5:
            strengths.append("Curiosity and inquiry")
        if mistakes == 0 and len(session.messages) > 5:
            strengths.append("Accuracy and attention to detail")
        return strengths

    @staticmethod
    def detect_optimal_learning_hours(session: SessionRecord) -> Optional[OptimalLearningHours]:
        # TODO: correlate session start times with scores once sessions carry timestamps.
        return None

    def _updated_neural_patterns(
        self,
        current: NeuralPatterns,
        session: SessionRecord,
        signals: set[str],
    ) -> NeuralPatterns:
        changes: Dict[str, Any] = {
            "preferred_explanation_length": self.explanation_length(session.messages),
        }
        for signal, field_name in AFFINITY_FIELDS.items():
            if signal in signals:
                base = getattr(current, field_name) or DEFAULT_AFFINITY
                changes[field_name] = clamp(base + AFFINITY_NUDGE, AFFINITY_RANGE)
        return current.model_copy(update=changes)

    @staticmethod
    def _session_insights(
        signals: set[str],
        session: SessionRecord,
        profile: CognitiveProfile,
    ) -> List[LearningInsight]:
        insights: List[LearningInsight] = []
        mistakes = len(session.mistakes)

        if session.duration_minutes > ACHIEVEMENT_MIN_MINUTES:
            insights.append(
                LearningInsight(
                    type="achievement",
                    title="Great Learning Session!",
                    description=(
                        f"You completed a {session.duration_minutes:g}-minute learning session on "
                        f"\"{session.topic}\". Your cognitive twin is learning from your patterns."
                    ),
                    priority="low",
                    actionable=False,
                )
            )

        if "visual" in signals and profile.learning_style != "Visual":
            insights.append(
                LearningInsight(
                    type="pattern",
                    title="Visual Learning Detected",
                    description=(
                        "Your interactions suggest you may benefit from more visual explanations. "
                        "Consider switching to Visual learning style in your profile."
                    ),
                    priority="medium",
                    actionable=True,
                    metadata={"suggested_style": "Visual"},
                )
            )

        if mistakes > len(session.messages) * MISTAKE_RATE_WARNING:
            insights.append(
                LearningInsight(
                    type="warning",
                    title="High Error Rate",
                    description=(
                        f"You encountered {mistakes} mistakes in this session. "
                        "Consider reviewing the fundamentals or slowing down the pace."
                    ),
                    priority="high",
                    actionable=True,
                    metadata={"mistake_count": mistakes},
                )
            )

        if session.corrections and mistakes == 0:
            insights.append(
                LearningInsight(
                    type="achievement",
                    title="Perfect Understanding!",
                    description=(
                        "You corrected all mistakes and showed complete comprehension. "
                        "Keep up the excellent work!"
                    ),
                    priority="low",
                    actionable=False,
                )
            )

        return insights


__all__ = [
    "ChatMessage",
    "EngagementMetrics",
    "LearningAnalyticsEngine",
    "LearningInsight",
    "SessionAnalysis",
    "SessionRecord",
    "session_from_chat",
]
