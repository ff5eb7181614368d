"""Application configuration."""

from .settings import (
    AnalysisConfig,
    ConfigurationError,
    OpenAIConfig,
    Settings,
    TranscriptionConfig,
    settings,
)

__all__ = [
    "AnalysisConfig",
    "ConfigurationError",
    "OpenAIConfig",
    "Settings",
    "TranscriptionConfig",
    "settings",
]
