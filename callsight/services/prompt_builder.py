"""Helpers to construct system/user prompts for the call analysis LLM.

Given the plain transcript and the recording duration, we emit:
* A system prompt describing the analyst persona and the strict JSON contract.
* A user prompt carrying the rubric, diarization rules and the transcript.

The rubric only lives in prose; the JSON contract itself is enforced by
``callsight.services.response_contract``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DurationBucket(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


SHORT_CALL_MAX_SECONDS = 120
MEDIUM_CALL_MAX_SECONDS = 600

# Weighted sub-categories of the 10-point score; the weights add up to 10.0.
SCORING_CATEGORIES: tuple[tuple[str, float, str], ...] = (
    (
        "Communication quality",
        2.5,
        "clarity, tone, active listening, professional language",
    ),
    (
        "Objective achievement",
        2.0,
        "whether the purpose of the call was met or clearly advanced",
    ),
    (
        "Engagement",
        1.5,
        "rapport, empathy, responsiveness to questions and concerns",
    ),
    (
        "Anomaly impact",
        2.0,
        "deductions driven by the severity-weighted negative findings",
    ),
    (
        "Context factors",
        1.0,
        "call type, difficulty of the situation, customer disposition",
    ),
    (
        "Technical execution",
        1.0,
        "accuracy of information, process adherence, compliance",
    ),
)

ANOMALY_SEVERITY_WEIGHTS: tuple[tuple[str, float, str], ...] = (
    ("critical", 1.0, "compliance breaches, misinformation, hostility, unresolved escalation"),
    ("moderate", 0.6, "missed objections, unclear explanations, long unexplained silences"),
    ("minor", 0.3, "filler words, small interruptions, slight pacing issues"),
)

CALL_TYPES: tuple[str, ...] = (
    "sales",
    "support",
    "consultation",
    "inquiry",
    "complaint",
    "follow-up",
)

_DURATION_GUIDANCE = {
    DurationBucket.SHORT: (
        "Short call (under 2 minutes): weight objective achievement and efficiency "
        "most; do not penalise the absence of extended rapport building."
    ),
    DurationBucket.MEDIUM: (
        "Medium call (2 to 10 minutes): balance communication quality, engagement "
        "and objective achievement evenly."
    ),
    DurationBucket.LONG: (
        "Long call (over 10 minutes): weight engagement, consistency of tone over "
        "time and context factors more; check whether the length was justified."
    ),
}

ANALYST_SYSTEM_PROMPT = (
    "You are a professional call quality analyst. You review transcripts of "
    "two-party business calls, attribute every utterance to a speaker and "
    "score the call against a fixed rubric. Always respond with a single valid "
    "JSON object and nothing else."
)


@dataclass(frozen=True)
class PromptBundle:
    system_prompt: str
    user_prompt: str


def classify_duration(duration_seconds: float) -> DurationBucket:
    """Bucket a call length: short < 2 min, medium 2-10 min, long > 10 min."""

    if duration_seconds < SHORT_CALL_MAX_SECONDS:
        return DurationBucket.SHORT
    if duration_seconds <= MEDIUM_CALL_MAX_SECONDS:
        return DurationBucket.MEDIUM
    return DurationBucket.LONG


def _format_duration(duration_seconds: float) -> str:
    total = max(0, int(duration_seconds))
    return f"{total // 60}m {total % 60}s"


def _scoring_section() -> str:
    lines = [
        f"- {name} ({weight:.1f} points): {hint}"
        for name, weight, hint in SCORING_CATEGORIES
    ]
    total = sum(weight for _, weight, _ in SCORING_CATEGORIES)
    lines.append(f"The categories add up to {total:.1f} points.")
    return "\n".join(lines)


def _severity_section() -> str:
    return "\n".join(
        f"- {level} (weight {weight:.1f}): {examples}"
        for level, weight, examples in ANOMALY_SEVERITY_WEIGHTS
    )


def build_prompt(*, transcript: str, duration_seconds: float) -> PromptBundle:
    """Compose system/user prompts for one call transcript."""

    bucket = classify_duration(duration_seconds)

    json_contract = (
        "{\n"
        '  "objective": string (short label of the call purpose, e.g. "Sales Inquiry"),\n'
        '  "transcript": [\n'
        '    {"speaker": "Caller" | "Receiver", "text": string, "timestamp": "mm:ss"}\n'
        "  ],\n"
        '  "anomalies": {\n'
        '    "caller": {"positive": [string], "negative": [string]},\n'
        '    "receiver": {"positive": [string], "negative": [string]}\n'
        "  },\n"
        '  "conclusion": string,\n'
        '  "suggestions": [string],\n'
        '  "score": number (0.0 to 10.0, one decimal),\n'
        '  "scoreReasoning": string\n'
        "}"
    )

    user_prompt = (
        "Analyze the following call recording transcript.\n\n"
        f"Call duration: {_format_duration(duration_seconds)} ({bucket.value} call)\n"
        f'Transcript: "{transcript.strip()}"\n\n'
        "1. OBJECTIVE\n"
        "Identify the purpose of the call in a short label.\n\n"
        "2. SPEAKER DIARIZATION\n"
        "Split the transcript into ordered segments and tag each one as \"Caller\" "
        "(the party who placed the call) or \"Receiver\" (the party who answered). "
        "Infer the roles from who initiates the conversation, who asks questions and "
        "who answers them. Estimate a mm:ss timestamp for every segment from the "
        "call duration; timestamps must never go backwards.\n\n"
        "3. CALL TYPE\n"
        f"Decide which type fits best ({', '.join(CALL_TYPES)}). Use it only to "
        "adjust tone and category weighting; do not output it as a separate field.\n\n"
        "4. DURATION\n"
        f"{_DURATION_GUIDANCE[bucket]}\n\n"
        "5. ANOMALIES\n"
        "For each party list positive behaviours and negative behaviours as short "
        "findings. Always include both lists for both parties, using an empty list "
        "when there is nothing to report. Rate every negative finding by severity:\n"
        f"{_severity_section()}\n"
        "Severity weights are not output fields; reflect them in the score and the "
        "score reasoning.\n\n"
        "6. SUGGESTIONS\n"
        "Give actionable recommendations addressed to the caller.\n\n"
        "7. SCORING\n"
        "Score the call from 0.0 to 10.0 using these weighted categories:\n"
        f"{_scoring_section()}\n"
        "Use 0.1 increments and the full range of the scale. Do not default to a "
        "mid-range value such as 5.0, 7.0 or 7.5; every score must follow from the "
        "category breakdown. In scoreReasoning, state the points given for each "
        "category and the anomalies that drove any deduction.\n\n"
        "Respond with valid JSON only, in exactly this structure:\n"
        f"{json_contract}\n"
        "Do not wrap the JSON in Markdown and do not add text before or after it."
    )

    return PromptBundle(
        system_prompt=ANALYST_SYSTEM_PROMPT,
        user_prompt=user_prompt,
    )


__all__ = [
    "ANALYST_SYSTEM_PROMPT",
    "ANOMALY_SEVERITY_WEIGHTS",
    "CALL_TYPES",
    "DurationBucket",
    "PromptBundle",
    "SCORING_CATEGORIES",
    "build_prompt",
    "classify_duration",
]
