"""Samvaad cognitive twin backend: session analysis, adaptive prompts, advocacy templates."""
