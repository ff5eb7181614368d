"""Callsight: speaker-attributed call transcription and quality analysis."""

__version__ = "1.0.0"
