"""Plain-text report for a finished call analysis."""

from __future__ import annotations

from datetime import datetime, timezone

from callsight.services.response_contract import CallAnalysis, Party

from .roles import RoleMap, infer_roles, speaker_role_label

_RULE = "=" * 33


def quality_band(score: float) -> str:
    """Excellent from 8.0, Good from 6.0, otherwise Needs Improvement."""

    if score >= 8:
        return "Excellent"
    if score >= 6:
        return "Good"
    return "Needs Improvement"


def _bullets(items) -> str:
    return "\n".join(f"• {item}" for item in items) if items else "None"


def _section(title: str, body: str) -> str:
    return f"{_RULE}\n{title}\n{_RULE}\n{body}"


def render_report(
    analysis: CallAnalysis,
    *,
    duration_seconds: int,
    raw_transcript: str = "",
    roles: RoleMap | None = None,
    generated_at: datetime | None = None,
) -> str:
    roles = roles or infer_roles(analysis)
    generated_at = generated_at or datetime.now(timezone.utc)
    duration = max(0, int(duration_seconds))

    transcript_lines = "\n".join(
        f"[{segment.timestamp}] {speaker_role_label(segment.speaker, roles)}: {segment.text}"
        for segment in analysis.transcript
    )

    findings: list[str] = []
    for party in (Party.CALLER, Party.RECEIVER):
        bucket = analysis.anomalies.for_party(party)
        label = speaker_role_label(party, roles).upper()
        findings.append(
            f"{label} ({party.value.upper()}) POSITIVE:\n{_bullets(bucket.positive)}\n\n"
            f"{label} ({party.value.upper()}) NEGATIVE:\n{_bullets(bucket.negative)}"
        )

    sections = [
        "COMPREHENSIVE CALL ANALYSIS REPORT\n"
        f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}\n"
        f"Duration: {duration // 60}m {duration % 60}s",
        _section("CALL OBJECTIVE", analysis.objective),
        _section("SPEAKER-AWARE TRANSCRIPT", transcript_lines),
        _section("DETECTED ANOMALIES", "\n\n".join(findings)),
        _section("CALL CONCLUSION", analysis.conclusion),
        _section("SUGGESTIONS", _bullets(analysis.suggestions)),
        _section(
            "CALL QUALITY SCORE",
            f"Score: {analysis.score:.1f}/10 ({quality_band(analysis.score)})\n"
            f"Reasoning: {analysis.score_reasoning}",
        ),
    ]
    if raw_transcript.strip():
        sections.append(f"{_RULE}\nRaw Transcript:\n{raw_transcript.strip()}")

    return "\n\n".join(sections)


__all__ = ["quality_band", "render_report"]
