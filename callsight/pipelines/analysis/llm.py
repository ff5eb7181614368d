"""Analysis LLM stage (Stage 04) of the call analysis pipeline."""

from __future__ import annotations

import logging

from callsight.services.llm_client import ChatCompletionClient
from callsight.services.openai_http import truncate_body
from callsight.services.response_contract import (
    AnalysisParseError,
    CallAnalysis,
    build_fallback_analysis,
)

from .types import AnalysisOutcome, AnalysisRequest

logger = logging.getLogger("callsight.services.analysis_pipeline")


def parse_analysis(
    raw_response: str,
    transcript: str,
    *,
    fallback_transcript_chars: int = 500,
) -> AnalysisOutcome:
    """Validate the raw reply; any contract violation yields the fallback analysis.

    Never raises for bad content: a reply that cannot be trusted is replaced
    locally, it is not re-requested.
    """

    try:
        analysis = CallAnalysis.from_json(raw_response)
    except AnalysisParseError as exc:
        logger.warning(
            "LLM produced an invalid analysis, using fallback: %s raw=%s",
            exc,
            truncate_body(raw_response or "", 500),
        )
        return AnalysisOutcome(
            analysis=build_fallback_analysis(transcript, max_chars=fallback_transcript_chars),
            raw_response=raw_response or "",
            used_fallback=True,
            parse_error=str(exc),
        )

    return AnalysisOutcome(analysis=analysis, raw_response=raw_response)


async def call_analysis_llm(
    client: ChatCompletionClient,
    request: AnalysisRequest,
    *,
    fallback_transcript_chars: int = 500,
) -> AnalysisOutcome:
    """Invoke the LLM once and validate the response contract.

    ``UpstreamAnalysisError`` from the client propagates: without a reply
    there is no content to fall back on.
    """

    raw_response = await client.invoke(
        system_prompt=request.system_prompt,
        user_prompt=request.user_prompt,
    )

    logger.info(
        "Raw LLM response bucket=%s: %s",
        request.duration_bucket.value,
        truncate_body(raw_response or "", 500),
    )

    outcome = parse_analysis(
        raw_response,
        request.transcript,
        fallback_transcript_chars=fallback_transcript_chars,
    )
    if not outcome.used_fallback:
        logger.info(
            "Analysis validated objective=%s score=%.1f segments=%s",
            outcome.analysis.objective,
            outcome.analysis.score,
            len(outcome.analysis.transcript),
        )
    return outcome


__all__ = ["call_analysis_llm", "parse_analysis"]
