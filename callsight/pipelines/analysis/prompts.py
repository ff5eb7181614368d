"""Prompt construction stage for the analysis pipeline.

Stage **03** turns the plain transcript + duration into the system/user
prompts consumed by the analysis LLM.
"""

from __future__ import annotations

import logging

from callsight.services.openai_http import truncate_body
from callsight.services.prompt_builder import build_prompt, classify_duration

from .types import AnalysisRequest

logger = logging.getLogger("callsight.services.analysis_pipeline")


def build_analysis_request(transcript: str, duration_seconds: float) -> AnalysisRequest:
    """Assemble prompts and metadata for the LLM invocation."""

    bucket = classify_duration(duration_seconds)
    prompt_bundle = build_prompt(transcript=transcript, duration_seconds=duration_seconds)

    logger.debug(
        "Prompts generated bucket=%s\nSYSTEM> %s\nUSER> %s",
        bucket.value,
        truncate_body(prompt_bundle.system_prompt, 500),
        truncate_body(prompt_bundle.user_prompt, 500),
    )

    return AnalysisRequest(
        transcript=transcript,
        duration_seconds=duration_seconds,
        duration_bucket=bucket,
        system_prompt=prompt_bundle.system_prompt,
        user_prompt=prompt_bundle.user_prompt,
    )


__all__ = ["build_analysis_request"]
