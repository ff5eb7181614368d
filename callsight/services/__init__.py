"""Service layer helpers for external integrations."""

from .llm_client import ChatCompletionClient, UpstreamAnalysisError
from .response_contract import AnalysisParseError, CallAnalysis
from .transcribe import (
    TranscriptionResult,
    TranscriptionService,
    UpstreamTranscriptionError,
)

__all__ = [
    "AnalysisParseError",
    "CallAnalysis",
    "ChatCompletionClient",
    "TranscriptionResult",
    "TranscriptionService",
    "UpstreamAnalysisError",
    "UpstreamTranscriptionError",
]
