"""Triage-Queue: hospital patient queue ordered by clinical priority."""

__version__ = "1.0.0"
