"""Resumable Claude Code conversations with per-conversation working directories."""

__version__ = "1.0.0"
