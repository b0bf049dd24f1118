"""Persistence repositories."""

from .cognitive_twins import CognitiveTwinRepository, StoredInsight, cognitive_twins

__all__ = ["CognitiveTwinRepository", "StoredInsight", "cognitive_twins"]
