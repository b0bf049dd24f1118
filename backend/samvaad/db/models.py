"""ORM models backing the cognitive twin persistence layer."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin

JSONType = JSON


class CognitiveTwinModel(TimestampMixin, Base):
    __tablename__ = "cognitive_twins"
    __table_args__ = (Index("ix_cognitive_twins_user_id", "user_id", unique=True),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    learning_style: Mapped[str] = mapped_column(String(32), default="Visual", nullable=False)
    communication_preference: Mapped[str] = mapped_column(
        String(32), default="Professional", nullable=False
    )
    comprehension_score: Mapped[float] = mapped_column(Float, default=75.0, nullable=False)
    communication_score: Mapped[float] = mapped_column(Float, default=75.0, nullable=False)
    adaptability_score: Mapped[float] = mapped_column(Float, default=80.0, nullable=False)
    learning_velocity: Mapped[float] = mapped_column(Float, default=1.0, nullable=False)
    optimal_learning_hours: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    strengths: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    areas_for_improvement: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    neural_patterns: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    last_sync_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )


class NeuralInsightModel(Base):
    __tablename__ = "neural_insights"
    __table_args__ = (Index("ix_neural_insights_user_created", "user_id", "created_at"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    insight_type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(16), default="medium", nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_actionable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    action_taken: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # "metadata" is reserved on declarative classes.
    insight_metadata: Mapped[dict] = mapped_column("metadata", JSONType, default=dict, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )


__all__ = ["CognitiveTwinModel", "NeuralInsightModel"]
