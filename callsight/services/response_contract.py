"""Pydantic models for validating the call analysis returned by the LLM.

The model's reply is untrusted free text. It is sanitized, decoded and
validated here into a :class:`CallAnalysis`; anything that does not fit the
contract raises :class:`AnalysisParseError` so the pipeline can swap in the
deterministic fallback built by :func:`build_fallback_analysis`. Either way
downstream code receives the same, complete shape.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    Strict,
    StrictStr,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

SCORE_MIN = 0.0
SCORE_MAX = 10.0

FALLBACK_OBJECTIVE = "Objective undetermined"
FALLBACK_FINDING = "Analysis error - manual review required"
FALLBACK_CONCLUSION = "Analysis could not be completed"
FALLBACK_SUGGESTION = "Manual review recommended"
FALLBACK_SCORE = 5.0  # Neutral sentinel, not a measurement.
FALLBACK_SCORE_REASONING = (
    "Score unavailable due to an analysis error; 5.0 is a neutral placeholder, "
    "not a measurement."
)
FALLBACK_EMPTY_TRANSCRIPT = "(no transcript available)"
FALLBACK_TIMESTAMP = "00:00"

# Validation context flag set while validating a model reply.
MODEL_REPLY_CONTEXT = "model_reply"

_TIMESTAMP_RE = re.compile(r"^(?:(\d{1,2}):)?(\d{1,3}):([0-5]\d)$")
_FENCE_OPEN_RE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_FENCE_CLOSE_RE = re.compile(r"\r?\n?[ \t]*```$")


class Party(str, Enum):
    """The two diarized parties of a call."""

    CALLER = "Caller"
    RECEIVER = "Receiver"

    @property
    def other(self) -> "Party":
        return Party.RECEIVER if self is Party.CALLER else Party.CALLER

    @property
    def key(self) -> str:
        """Key used for this party inside ``anomalies``."""

        return self.value.lower()


class Speaker(str, Enum):
    """Speaker tag of a transcript segment; SYSTEM only appears in fallbacks."""

    CALLER = "Caller"
    RECEIVER = "Receiver"
    SYSTEM = "System"


class AnalysisParseError(ValueError):
    """Raised when the model reply cannot be decoded into a valid CallAnalysis."""

    def __init__(self, message: str, *, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


def timestamp_to_seconds(value: str) -> int:
    """Convert ``mm:ss`` (or ``h:mm:ss``) into seconds."""

    match = _TIMESTAMP_RE.match(value.strip())
    if not match:
        raise ValueError(f"timestamp {value!r} is not in mm:ss form")
    hours, minutes, seconds = match.groups()
    total = int(minutes) * 60 + int(seconds)
    if hours is not None:
        if int(minutes) > 59:
            raise ValueError(f"timestamp {value!r} has more than 59 minutes")
        total += int(hours) * 3600
    return total


class _ContractModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )


class SpeakerSegment(_ContractModel):
    speaker: Speaker
    text: StrictStr = Field(min_length=1)
    timestamp: StrictStr

    @field_validator("speaker")
    @classmethod
    def speaker_is_a_party(cls, value: Speaker, info: ValidationInfo) -> Speaker:
        if value is Speaker.SYSTEM and (info.context or {}).get(MODEL_REPLY_CONTEXT):
            raise ValueError("speaker must be Caller or Receiver")
        return value

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("segment text must not be blank")
        return value

    @field_validator("timestamp")
    @classmethod
    def timestamp_format(cls, value: str) -> str:
        timestamp_to_seconds(value)
        return value.strip()


class AnomalyBucket(_ContractModel):
    """Findings for one party; both lists are required, either may be empty."""

    positive: tuple[StrictStr, ...]
    negative: tuple[StrictStr, ...]


class PartyAnomalies(_ContractModel):
    caller: AnomalyBucket
    receiver: AnomalyBucket

    def for_party(self, party: Party) -> AnomalyBucket:
        return self.caller if party is Party.CALLER else self.receiver


class CallAnalysis(_ContractModel):
    """Root record of one analysed call."""

    objective: StrictStr
    transcript: tuple[SpeakerSegment, ...] = Field(min_length=1)
    anomalies: PartyAnomalies
    conclusion: StrictStr
    suggestions: tuple[StrictStr, ...]
    score: Annotated[
        float,
        Strict(),
        Field(ge=SCORE_MIN, le=SCORE_MAX, allow_inf_nan=False),
    ]
    score_reasoning: StrictStr = Field(alias="scoreReasoning")

    @field_validator("score")
    @classmethod
    def round_score(cls, value: float) -> float:
        return round(float(value), 1)

    @model_validator(mode="after")
    def timestamps_non_decreasing(self) -> "CallAnalysis":
        previous = -1
        for index, segment in enumerate(self.transcript):
            current = timestamp_to_seconds(segment.timestamp)
            if current < previous:
                raise ValueError(
                    f"transcript[{index}] timestamp {segment.timestamp} goes backwards"
                )
            previous = current
        return self

    @classmethod
    def from_json(cls, payload: str) -> "CallAnalysis":
        """Sanitize, decode and validate a raw model reply."""

        cleaned = clean_json_payload(payload)
        if not cleaned:
            raise AnalysisParseError("LLM returned an empty response", raw_response=payload or "")
        try:
            data = json.loads(cleaned)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise AnalysisParseError(f"Invalid JSON: {exc}", raw_response=payload) from exc
        return cls.from_data(data, raw_response=payload)

    @classmethod
    def from_data(cls, data: Any, *, raw_response: str = "") -> "CallAnalysis":
        """Validate already-decoded model output against the contract.

        Stricter than plain ``model_validate``: the ``System`` speaker belongs to
        the fallback analysis and is rejected in a model reply.
        """

        if not isinstance(data, dict):
            raise AnalysisParseError(
                f"Expected a JSON object, got {type(data).__name__}",
                raw_response=raw_response,
            )
        try:
            return cls.model_validate(data, context={MODEL_REPLY_CONTEXT: True})
        except ValidationError as exc:
            raise AnalysisParseError(
                f"Schema violation: {exc}", raw_response=raw_response
            ) from exc

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict using the wire field names."""

        return self.model_dump(mode="json", by_alias=True)


def clean_json_payload(payload: str | None) -> str:
    """Strip one surrounding Markdown code fence and surrounding whitespace."""

    if not payload:
        return ""

    cleaned = payload.strip()
    opened = _FENCE_OPEN_RE.match(cleaned)
    if opened:
        cleaned = cleaned[opened.end():]
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    elif cleaned.endswith("```"):
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)

    return cleaned.strip()


def build_fallback_analysis(raw_transcript: str, *, max_chars: int = 500) -> CallAnalysis:
    """Deterministic, schema-complete analysis used when the reply is unusable."""

    excerpt = (raw_transcript or "").strip()[:max_chars].strip()
    failure_bucket = AnomalyBucket(positive=(), negative=(FALLBACK_FINDING,))
    return CallAnalysis(
        objective=FALLBACK_OBJECTIVE,
        transcript=(
            SpeakerSegment(
                speaker=Speaker.SYSTEM,
                text=excerpt or FALLBACK_EMPTY_TRANSCRIPT,
                timestamp=FALLBACK_TIMESTAMP,
            ),
        ),
        anomalies=PartyAnomalies(caller=failure_bucket, receiver=failure_bucket),
        conclusion=FALLBACK_CONCLUSION,
        suggestions=(FALLBACK_SUGGESTION,),
        score=FALLBACK_SCORE,
        scoreReasoning=FALLBACK_SCORE_REASONING,
    )


def empty_analysis_payload() -> dict[str, Any]:
    """Empty-shaped analysis used in fatal error responses."""

    return {
        "objective": "",
        "transcript": [],
        "anomalies": {
            "caller": {"positive": [], "negative": []},
            "receiver": {"positive": [], "negative": []},
        },
        "conclusion": "",
        "suggestions": [],
        "score": 0,
        "scoreReasoning": "",
    }


__all__ = [
    "AnalysisParseError",
    "AnomalyBucket",
    "CallAnalysis",
    "FALLBACK_CONCLUSION",
    "FALLBACK_FINDING",
    "FALLBACK_OBJECTIVE",
    "FALLBACK_SCORE",
    "FALLBACK_SCORE_REASONING",
    "FALLBACK_SUGGESTION",
    "Party",
    "PartyAnomalies",
    "Speaker",
    "SpeakerSegment",
    "build_fallback_analysis",
    "clean_json_payload",
    "empty_analysis_payload",
    "timestamp_to_seconds",
]
