"""Templating — kida environment setup and the ``Template`` return type."""

from perch.templating.returns import Template

__all__ = ["Template"]
