"""Orbit: personal daily-study progress tracker with an optional store server."""

__version__ = "0.1.0"
