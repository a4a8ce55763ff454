"""Ranked best-score store for per-track, per-difficulty leaderboards."""

__version__ = "1.0.0"
