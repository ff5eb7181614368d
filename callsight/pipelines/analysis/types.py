"""Typed containers shared across the call analysis pipeline.

These dataclasses intentionally live in their own module so the other
stages (`prompts`, `llm`, `flow`) can import them without creating circular
dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from callsight.services.prompt_builder import DurationBucket
from callsight.services.response_contract import CallAnalysis

from .roles import RoleMap


class PipelineState(str, Enum):
    PENDING = "pending"
    TRANSCRIBING = "transcribing"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisRequest:
    """Normalized payload handed to the analysis LLM client."""

    transcript: str
    duration_seconds: float
    duration_bucket: DurationBucket
    system_prompt: str
    user_prompt: str


@dataclass(frozen=True)
class AnalysisOutcome:
    """Validated (or fallback) analysis produced by the LLM stage."""

    analysis: CallAnalysis
    raw_response: str
    used_fallback: bool = False
    parse_error: str | None = None


@dataclass(frozen=True)
class PipelineResult:
    """Everything one completed pipeline run hands back to its caller."""

    transcript: str
    duration_seconds: float
    analysis: CallAnalysis
    roles: RoleMap
    legacy_anomalies: tuple[str, ...]
    used_fallback: bool = False
    states: tuple[PipelineState, ...] = field(default_factory=tuple)

    @property
    def state(self) -> PipelineState:
        return self.states[-1] if self.states else PipelineState.PENDING


__all__ = [
    "AnalysisOutcome",
    "AnalysisRequest",
    "PipelineResult",
    "PipelineState",
]
