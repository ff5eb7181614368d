"""Speech-to-text integration over the OpenAI-compatible transcription API."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass

import httpx

from callsight.config.settings import OpenAIConfig, TranscriptionConfig
from callsight.telemetry import observe_upstream_call

from .openai_http import bearer_headers, create_http_client, truncate_body

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranscriptionResult:
    """Plain transcript text plus the audio duration reported upstream."""

    transcript: str
    duration_seconds: float = 0.0


class UpstreamTranscriptionError(RuntimeError):
    """Raised when the transcription service cannot produce a transcript.

    ``status_code`` is ``None`` when the service was never reached (timeout or
    transport failure).
    """

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TranscriptionService:
    """Send one recording to the speech-to-text service and return its text."""

    def __init__(
        self,
        openai_config: OpenAIConfig,
        config: TranscriptionConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._openai = openai_config
        self._config = config
        self._transport = transport

    async def transcribe(
        self,
        audio_bytes: bytes,
        content_type: str,
        file_name: str,
    ) -> TranscriptionResult:
        """Upload the audio and return ``(transcript, duration)``."""

        api_key = self._openai.require_api_key()

        files = {"file": (file_name or "audio", audio_bytes, content_type)}
        data = {
            "model": self._config.model,
            "response_format": self._config.response_format,
        }

        logger.info(
            "Sending %s bytes (%s) to transcription model=%s",
            len(audio_bytes),
            content_type,
            self._config.model,
        )

        start_time = time.perf_counter()
        async with create_http_client(
            self._openai,
            timeout_seconds=self._config.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(
                    "/audio/transcriptions",
                    headers=bearer_headers(api_key),
                    data=data,
                    files=files,
                )
            except httpx.TimeoutException as exc:
                observe_upstream_call("transcription", "timeout", time.perf_counter() - start_time)
                raise UpstreamTranscriptionError(
                    f"Transcription API timed out after {self._config.timeout_seconds}s"
                ) from exc
            except httpx.RequestError as exc:
                observe_upstream_call("transcription", "unreachable", time.perf_counter() - start_time)
                raise UpstreamTranscriptionError(
                    f"Unable to reach transcription API: {exc}"
                ) from exc

        elapsed = time.perf_counter() - start_time
        if response.status_code >= 400:
            observe_upstream_call("transcription", "http_error", elapsed)
            body = truncate_body(response.text)
            logger.error("Transcription API error %s: %s", response.status_code, body)
            raise UpstreamTranscriptionError(
                f"Whisper API error: {response.status_code} - {body}",
                status_code=response.status_code,
                body=body,
            )

        observe_upstream_call("transcription", "ok", elapsed)
        return _parse_transcription_body(response)


def _parse_transcription_body(response: httpx.Response) -> TranscriptionResult:
    """Read ``text`` and ``duration`` from a verbose JSON (or plain text) reply."""

    try:
        payload = response.json()
    except ValueError:
        return TranscriptionResult(transcript=response.text.strip())

    if not isinstance(payload, dict):
        raise UpstreamTranscriptionError(
            "Transcription API returned an unexpected payload",
            status_code=response.status_code,
            body=truncate_body(response.text),
        )

    text = payload.get("text")
    duration = payload.get("duration")
    try:
        duration_seconds = float(duration) if duration is not None else 0.0
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric duration %r", duration)
        duration_seconds = 0.0
    if not math.isfinite(duration_seconds):
        duration_seconds = 0.0

    return TranscriptionResult(
        transcript=str(text or "").strip(),
        duration_seconds=max(0.0, duration_seconds),
    )


__all__ = [
    "TranscriptionResult",
    "TranscriptionService",
    "UpstreamTranscriptionError",
]
