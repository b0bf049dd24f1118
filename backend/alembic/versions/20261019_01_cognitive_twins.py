"""Cognitive twin profiles and neural insights."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261019_01_cognitive_twins"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "cognitive_twins",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("learning_style", sa.String(length=32), nullable=False, server_default="Visual"),
        sa.Column("communication_preference", sa.String(length=32), nullable=False, server_default="Professional"),
        sa.Column("comprehension_score", sa.Float(), nullable=False, server_default="75"),
        sa.Column("communication_score", sa.Float(), nullable=False, server_default="75"),
        sa.Column("adaptability_score", sa.Float(), nullable=False, server_default="80"),
        sa.Column("learning_velocity", sa.Float(), nullable=False, server_default="1"),
        sa.Column("optimal_learning_hours", sa.JSON(), nullable=False),
        sa.Column("strengths", sa.JSON(), nullable=False),
        sa.Column("areas_for_improvement", sa.JSON(), nullable=False),
        sa.Column("neural_patterns", sa.JSON(), nullable=False),
        sa.Column("last_sync_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    )
    op.create_index("ix_cognitive_twins_user_id", "cognitive_twins", ["user_id"], unique=True)

    op.create_table(
        "neural_insights",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("insight_type", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(length=16), nullable=False, server_default="medium"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_actionable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("action_taken", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    )
    op.create_index("ix_neural_insights_user_created", "neural_insights", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_neural_insights_user_created", table_name="neural_insights")
    op.drop_table("neural_insights")
    op.drop_index("ix_cognitive_twins_user_id", table_name="cognitive_twins")
    op.drop_table("cognitive_twins")
