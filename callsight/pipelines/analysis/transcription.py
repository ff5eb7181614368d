"""Transcription stage (Stage 02) of the analysis pipeline."""

from __future__ import annotations

import logging

from callsight.services.transcribe import (
    TranscriptionResult,
    TranscriptionService,
    UpstreamTranscriptionError,
)

logger = logging.getLogger("callsight.services.analysis_pipeline")
transcript_logger = logging.getLogger("callsight.logs.transcript")


async def transcribe_audio(
    service: TranscriptionService,
    audio_bytes: bytes,
    content_type: str,
    file_name: str,
) -> TranscriptionResult:
    """Delegate to the speech-to-text service; upstream failures stay fatal."""

    logger.info("Processing audio file: %s (%s)", file_name, content_type)
    try:
        result = await service.transcribe(audio_bytes, content_type, file_name)
    except UpstreamTranscriptionError as exc:
        logger.error(
            "Transcription failed file=%s status=%s: %s",
            file_name,
            exc.status_code,
            exc,
        )
        raise

    logger.info(
        "Transcription completed file=%s chars=%s duration=%.1fs",
        file_name,
        len(result.transcript),
        result.duration_seconds,
    )
    transcript_logger.info("file=%s | duration=%.1f | text=%s", file_name, result.duration_seconds, result.transcript)
    return result


__all__ = ["transcribe_audio"]
