"""Call transcription and analysis endpoints.

For a stage-by-stage map see
`callsight.pipelines.analysis.flow.CallAnalysisPipeline`. The POST
`/transcribe-audio` endpoint performs:

1. Base64 decoding + transcription of the uploaded recording.
2. Rubric-constrained analysis by the chat model, validated or replaced by the
   fallback analysis.
3. Role inference and the legacy flat anomaly projection.

CORS preflight requests are answered by the application's CORS middleware.
"""

import logging
import traceback

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, PlainTextResponse

from callsight.config.dependencies import PipelineDep, SettingsDep
from callsight.pipelines.analysis import (
    CallAnalysisPipeline,
    PipelineError,
    infer_roles,
    render_report,
    round_duration,
)
from callsight.services.response_contract import CallAnalysis, empty_analysis_payload
from callsight.views import (
    ReportRequest,
    RoleMapResponse,
    TranscriptionErrorResponse,
    TranscriptionRequest,
    TranscriptionResponse,
)

router = APIRouter(tags=["calls"])

logger = logging.getLogger(__name__)

PIPELINE_STAGES = tuple(CallAnalysisPipeline.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""


@router.post(
    "/transcribe-audio",
    response_model=TranscriptionResponse,
    responses={500: {"model": TranscriptionErrorResponse}},
)
async def transcribe_audio(
    payload: TranscriptionRequest,
    pipeline: PipelineDep,
    app_settings: SettingsDep,
):
    """Transcribe a base64 recording and return its structured quality analysis."""

    try:
        result = await pipeline.run(
            audio=payload.audio,
            file_name=payload.file_name,
            file_type=payload.file_type,
        )
    except PipelineError as exc:
        logger.error(
            "Transcription error file=%s failed_in=%s: %s",
            payload.file_name,
            exc.failed_in.value,
            exc,
        )
        error_body = TranscriptionErrorResponse(
            error=str(exc),
            stack=(
                "".join(traceback.format_exception(exc.__cause__ or exc))
                if app_settings.debug
                else None
            ),
            analysis=empty_analysis_payload(),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body.model_dump(exclude_none=True),
        )

    return TranscriptionResponse(
        transcript=result.transcript,
        anomalies=list(result.legacy_anomalies),
        suggestions=list(result.analysis.suggestions),
        duration=round_duration(result.duration_seconds),
        analysis=result.analysis,
        roles=RoleMapResponse.model_validate(result.roles.to_payload()),
    )


@router.post("/roles", response_model=RoleMapResponse)
async def identify_roles(analysis: CallAnalysis) -> RoleMapResponse:
    """Return which party acted as Agent and which as Customer."""

    return RoleMapResponse.model_validate(infer_roles(analysis).to_payload())


@router.post("/reports", response_class=PlainTextResponse)
async def download_report(payload: ReportRequest) -> PlainTextResponse:
    """Render a stored analysis as a downloadable plain-text report."""

    report = render_report(
        payload.analysis,
        duration_seconds=payload.duration,
        raw_transcript=payload.transcript,
    )
    return PlainTextResponse(
        report,
        headers={"Content-Disposition": 'attachment; filename="call-analysis-report.txt"'},
    )
