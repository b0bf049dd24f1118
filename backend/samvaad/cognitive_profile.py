"""Cognitive twin profile models, defaults, and merge helpers."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

LearningStyle = Literal["Visual", "Auditory", "Kinesthetic", "Reading/Writing"]
CommunicationPreference = Literal["Professional", "Casual", "Empathetic", "Direct"]
ExplanationLength = Literal["brief", "moderate", "detailed"]
FeedbackResponseType = Literal["encouraging", "direct", "analytical"]
StressResponsePattern = Literal["calm", "anxious", "focused"]

LEARNING_STYLES: tuple[str, ...] = ("Visual", "Auditory", "Kinesthetic", "Reading/Writing")
COMMUNICATION_PREFERENCES: tuple[str, ...] = ("Professional", "Casual", "Empathetic", "Direct")

SCORE_RANGE = (0.0, 100.0)
VELOCITY_RANGE = (0.5, 2.0)
AFFINITY_RANGE = (0.0, 10.0)

DEFAULT_COMPREHENSION_SCORE = 75.0
DEFAULT_COMMUNICATION_SCORE = 75.0
DEFAULT_ADAPTABILITY_SCORE = 80.0
DEFAULT_LEARNING_VELOCITY = 1.0


def clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


class OptimalLearningHours(BaseModel):
    start: int = Field(default=9, ge=0, le=23)
    end: int = Field(default=11, ge=0, le=23)


class NeuralPatterns(BaseModel):
    """Qualitative and 0-10 quantitative interaction traits.

    Accepts both snake_case and camelCase keys so rows written by the web
    client validate unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    preferred_explanation_length: ExplanationLength = "moderate"
    visual_learning_affinity: float = Field(default=7, ge=0, le=10)
    abstract_thinking_level: float = Field(default=6, ge=0, le=10)
    practical_application_preference: float = Field(default=7, ge=0, le=10)
    repetition_needed: float = Field(default=2, ge=0, le=10)
    feedback_response_type: FeedbackResponseType = "encouraging"
    stress_response_pattern: StressResponsePattern = "calm"
    social_interaction_comfort: float = Field(default=6, ge=0, le=10)


class CognitiveProfile(BaseModel):
    user_id: str
    learning_style: LearningStyle = "Visual"
    communication_preference: CommunicationPreference = "Professional"
    comprehension_score: float = Field(default=DEFAULT_COMPREHENSION_SCORE, ge=0, le=100)
    communication_score: float = Field(default=DEFAULT_COMMUNICATION_SCORE, ge=0, le=100)
    adaptability_score: float = Field(default=DEFAULT_ADAPTABILITY_SCORE, ge=0, le=100)
    learning_velocity: float = Field(default=DEFAULT_LEARNING_VELOCITY, ge=0.5, le=2.0)
    optimal_learning_hours: OptimalLearningHours = Field(default_factory=OptimalLearningHours)
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)
    neural_patterns: NeuralPatterns = Field(default_factory=NeuralPatterns)


class ProfileUpdate(BaseModel):
    """Partial profile produced by an analysis run; merging is the caller's job."""

    comprehension_score: Optional[float] = Field(default=None, ge=0, le=100)
    communication_score: Optional[float] = Field(default=None, ge=0, le=100)
    adaptability_score: Optional[float] = Field(default=None, ge=0, le=100)
    learning_velocity: Optional[float] = Field(default=None, ge=0.5, le=2.0)
    optimal_learning_hours: Optional[OptimalLearningHours] = None
    strengths: Optional[List[str]] = None
    areas_for_improvement: Optional[List[str]] = None
    neural_patterns: Optional[NeuralPatterns] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


def default_profile(user_id: str) -> CognitiveProfile:
    return CognitiveProfile(user_id=user_id)


def merge_unique(existing: Iterable[str], additions: Iterable[str]) -> List[str]:
    """Order-preserving union that drops blanks and repeated labels."""
    merged: List[str] = []
    seen: set[str] = set()
    for label in list(existing) + list(additions):
        if not isinstance(label, str):
            continue
        cleaned = label.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            merged.append(cleaned)
    return merged


def _coerce_number(value: Any, default: float, bounds: tuple[float, float]) -> float:
    # Zero, blanks and non-numeric values all fall back to the default.
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or number == 0:
        return default
    return clamp(number, bounds)


def _coerce_choice(value: Any, choices: tuple[str, ...], default: str) -> str:
    if isinstance(value, str) and value in choices:
        return value
    if value is not None:
        logger.debug("Ignoring unsupported profile value %r", value)
    return default


def _neural_field_name(key: str) -> Optional[str]:
    if key in NeuralPatterns.model_fields:
        return key
    for name, info in NeuralPatterns.model_fields.items():
        if info.alias == key:
            return name
    return None


def neural_patterns_from_record(raw: Any) -> NeuralPatterns:
    """Merge stored neural pattern entries over the defaults, skipping invalid ones."""
    current = NeuralPatterns().model_dump()
    if not isinstance(raw, Mapping):
        return NeuralPatterns.model_validate(current)

    for key, value in raw.items():
        name = _neural_field_name(str(key))
        if name is None:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = clamp(float(value), AFFINITY_RANGE)
        candidate = {**current, name: value}
        try:
            NeuralPatterns.model_validate(candidate)
        except ValidationError:
            logger.debug("Dropping invalid neural pattern %s=%r", key, value)
            continue
        current = candidate
    return NeuralPatterns.model_validate(current)


def _hours_from_record(raw: Any) -> OptimalLearningHours:
    if isinstance(raw, Mapping):
        try:
            return OptimalLearningHours.model_validate(raw)
        except ValidationError:
            logger.debug("Dropping invalid optimal learning hours %r", raw)
    return OptimalLearningHours()


def _labels_from_record(raw: Any) -> List[str]:
    if isinstance(raw, (list, tuple)):
        return merge_unique([], raw)
    return []


def profile_from_record(
    user_id: str,
    record: Optional[Mapping[str, Any]],
    *,
    learning_style: Optional[str] = None,
    communication_preference: Optional[str] = None,
) -> CognitiveProfile:
    """Build a profile from a loosely typed stored row, substituting defaults.

    Never raises for bad field values: each unusable field silently takes its
    documented default.
    """
    row: Mapping[str, Any] = record or {}
    style = learning_style if learning_style is not None else row.get("learning_style")
    preference = (
        communication_preference
        if communication_preference is not None
        else row.get("communication_preference")
    )
    return CognitiveProfile(
        user_id=user_id,
        learning_style=_coerce_choice(style, LEARNING_STYLES, "Visual"),  # type: ignore[arg-type]
        communication_preference=_coerce_choice(  # type: ignore[arg-type]
            preference, COMMUNICATION_PREFERENCES, "Professional"
        ),
        comprehension_score=_coerce_number(
            row.get("comprehension_score"), DEFAULT_COMPREHENSION_SCORE, SCORE_RANGE
        ),
        communication_score=_coerce_number(
            row.get("communication_score"), DEFAULT_COMMUNICATION_SCORE, SCORE_RANGE
        ),
        adaptability_score=_coerce_number(
            row.get("adaptability_score"), DEFAULT_ADAPTABILITY_SCORE, SCORE_RANGE
        ),
        learning_velocity=_coerce_number(
            row.get("learning_velocity"), DEFAULT_LEARNING_VELOCITY, VELOCITY_RANGE
        ),
        optimal_learning_hours=_hours_from_record(row.get("optimal_learning_hours")),
        strengths=_labels_from_record(row.get("strengths")),
        areas_for_improvement=_labels_from_record(row.get("areas_for_improvement")),
        neural_patterns=neural_patterns_from_record(row.get("neural_patterns")),
    )


def apply_profile_update(profile: CognitiveProfile, update: ProfileUpdate) -> CognitiveProfile:
    """Return a copy of ``profile`` with ``update`` merged in."""
    changes: Dict[str, Any] = {}
    if update.comprehension_score is not None:
        changes["comprehension_score"] = clamp(update.comprehension_score, SCORE_RANGE)
    if update.communication_score is not None:
        changes["communication_score"] = clamp(update.communication_score, SCORE_RANGE)
    if update.adaptability_score is not None:
        changes["adaptability_score"] = clamp(update.adaptability_score, SCORE_RANGE)
    if update.learning_velocity is not None:
        changes["learning_velocity"] = clamp(update.learning_velocity, VELOCITY_RANGE)
    if update.optimal_learning_hours is not None:
        changes["optimal_learning_hours"] = update.optimal_learning_hours.model_copy()
    if update.strengths is not None:
        changes["strengths"] = merge_unique(profile.strengths, update.strengths)
    if update.areas_for_improvement is not None:
        changes["areas_for_improvement"] = merge_unique(
            profile.areas_for_improvement, update.areas_for_improvement
        )
    if update.neural_patterns is not None:
        changes["neural_patterns"] = update.neural_patterns.model_copy()
    return profile.model_copy(deep=True, update=changes)


__all__ = [
    "COMMUNICATION_PREFERENCES",
    "CognitiveProfile",
    "CommunicationPreference",
    "LEARNING_STYLES",
    "LearningStyle",
    "NeuralPatterns",
    "OptimalLearningHours",
    "ProfileUpdate",
    "apply_profile_update",
    "clamp",
    "default_profile",
    "merge_unique",
    "neural_patterns_from_record",
    "profile_from_record",
]
