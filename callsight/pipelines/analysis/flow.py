"""Orchestration of the call analysis pipeline.

Canonical execution order for ``POST /transcribe-audio``:

1. ``ingestion`` – decode the base64 upload and resolve its content type.
2. ``transcription`` – send the audio to the speech-to-text service.
3. ``prompts`` – build the rubric-constrained analysis prompt.
4. ``llm`` – call the chat model, sanitize and validate its reply, or fall back.
5. ``roles`` – infer which party acted as Agent and which as Customer.
6. ``legacy`` – flatten the anomaly buckets for the old flat-array contract.

Run states move ``PENDING -> TRANSCRIBING -> ANALYZING -> COMPLETED``. Only
failures that leave no content behind (missing credential or audio, upstream
errors) end in ``FAILED``; a reply that fails validation still completes,
carrying the fallback analysis.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

from callsight.config.settings import AnalysisConfig, ConfigurationError
from callsight.services.llm_client import ChatCompletionClient, UpstreamAnalysisError
from callsight.services.transcribe import TranscriptionService, UpstreamTranscriptionError
from callsight.telemetry import record_pipeline_outcome

from .ingestion import (
    AudioPayloadError,
    decode_audio_payload,
    resolve_content_type,
    resolve_file_name,
)
from .legacy import flatten_anomalies
from .llm import call_analysis_llm
from .prompts import build_analysis_request
from .roles import infer_roles
from .transcription import transcribe_audio
from .types import PipelineResult, PipelineState

logger = logging.getLogger("callsight.services.analysis_pipeline")

_TRANSCRIBING_FATAL = (ConfigurationError, AudioPayloadError, UpstreamTranscriptionError)
_ANALYZING_FATAL = (ConfigurationError, UpstreamAnalysisError)


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the analysis pipeline."""

    order: int
    name: str
    module: str
    summary: str


class PipelineError(RuntimeError):
    """A fatal pipeline failure; the cause is chained as ``__cause__``."""

    def __init__(
        self,
        message: str,
        *,
        failed_in: PipelineState,
        states: tuple[PipelineState, ...],
    ) -> None:
        super().__init__(message)
        self.failed_in = failed_in
        self.states = states

    @property
    def state(self) -> PipelineState:
        return PipelineState.FAILED


class _RunTracker:
    """State history of a single run; never shared between runs."""

    def __init__(self) -> None:
        self.states: list[PipelineState] = [PipelineState.PENDING]

    @property
    def current(self) -> PipelineState:
        return self.states[-1]

    def advance(self, state: PipelineState) -> None:
        logger.debug("Pipeline state %s -> %s", self.current.value, state.value)
        self.states.append(state)

    def fail(self, exc: Exception) -> PipelineError:
        failed_in = self.current
        self.states.append(PipelineState.FAILED)
        return PipelineError(
            str(exc),
            failed_in=failed_in,
            states=tuple(self.states),
        )


class CallAnalysisPipeline:
    """Sequence transcription, analysis and post-processing for one recording."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Ingestion",
            "callsight.pipelines.analysis.ingestion",
            "Decode the base64 audio and resolve its MIME type and file name.",
        ),
        PipelineStage(
            2,
            "Transcription",
            "callsight.pipelines.analysis.transcription",
            "Forward the audio bytes to the speech-to-text service for text and duration.",
        ),
        PipelineStage(
            3,
            "Prompt Assembly",
            "callsight.pipelines.analysis.prompts",
            "Render the rubric, diarization rules and JSON contract around the transcript.",
        ),
        PipelineStage(
            4,
            "LLM Invocation",
            "callsight.pipelines.analysis.llm",
            "Call the chat model, sanitize and validate its JSON, or substitute the fallback.",
        ),
        PipelineStage(
            5,
            "Role Inference",
            "callsight.pipelines.analysis.roles",
            "Decide which party acted as Agent from the positive findings.",
        ),
        PipelineStage(
            6,
            "Legacy Projection",
            "callsight.pipelines.analysis.legacy",
            "Flatten the four anomaly lists for the old single-array contract.",
        ),
    ]

    def __init__(
        self,
        transcription_service: TranscriptionService,
        llm_client: ChatCompletionClient,
        analysis_config: AnalysisConfig,
    ) -> None:
        self._transcription_service = transcription_service
        self._llm_client = llm_client
        self._analysis_config = analysis_config

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)

    async def run(
        self,
        *,
        audio: str | None,
        file_name: str | None,
        file_type: str | None,
    ) -> PipelineResult:
        """Process one base64-encoded recording end to end.

        Raises:
            PipelineError: when the run ends in ``FAILED``.
        """

        tracker = _RunTracker()

        tracker.advance(PipelineState.TRANSCRIBING)
        try:
            audio_bytes = decode_audio_payload(audio)
            content_type = resolve_content_type(file_type, file_name)
            resolved_name = resolve_file_name(file_name)
            transcription = await transcribe_audio(
                self._transcription_service,
                audio_bytes,
                content_type,
                resolved_name,
            )
        except _TRANSCRIBING_FATAL as exc:
            error = tracker.fail(exc)
            logger.error("Pipeline failed while transcribing: %s", exc)
            record_pipeline_outcome("failed")
            raise error from exc

        tracker.advance(PipelineState.ANALYZING)
        request = build_analysis_request(
            transcription.transcript,
            transcription.duration_seconds,
        )
        try:
            outcome = await call_analysis_llm(
                self._llm_client,
                request,
                fallback_transcript_chars=self._analysis_config.fallback_transcript_chars,
            )
        except _ANALYZING_FATAL as exc:
            error = tracker.fail(exc)
            logger.error("Pipeline failed while analyzing: %s", exc)
            record_pipeline_outcome("failed")
            raise error from exc

        roles = infer_roles(outcome.analysis)
        legacy_anomalies = flatten_anomalies(outcome.analysis)
        tracker.advance(PipelineState.COMPLETED)

        record_pipeline_outcome("fallback" if outcome.used_fallback else "completed")
        logger.info(
            "Pipeline completed file=%s fallback=%s score=%.1f agent=%s",
            resolved_name,
            outcome.used_fallback,
            outcome.analysis.score,
            roles.agent_role.value,
        )

        return PipelineResult(
            transcript=transcription.transcript,
            duration_seconds=transcription.duration_seconds,
            analysis=outcome.analysis,
            roles=roles,
            legacy_anomalies=legacy_anomalies,
            used_fallback=outcome.used_fallback,
            states=tuple(tracker.states),
        )


__all__ = ["CallAnalysisPipeline", "PipelineError", "PipelineStage"]
