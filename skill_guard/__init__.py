"""Skill activation and guardrail enforcement for assistant hook events."""

__version__ = "0.1.0"
