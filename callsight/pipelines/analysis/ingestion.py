"""Request ingestion helpers (Stage 01 of the analysis pipeline)."""

from __future__ import annotations

import base64
import binascii
import mimetypes
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

_DEFAULT_CONTENT_TYPE: Final[str] = "audio/mpeg"
_DEFAULT_FILE_NAME: Final[str] = "audio"


class AudioPayloadError(ValueError):
    """Raised when the request carries no usable audio."""


def decode_audio_payload(audio: str | None) -> bytes:
    """Decode the base64 audio field, rejecting missing or empty payloads."""

    if not audio or not audio.strip():
        raise AudioPayloadError("No audio data provided")

    encoded = audio.strip()
    # Data URLs from browser recorders carry a "data:audio/webm;base64," prefix.
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]

    try:
        audio_bytes = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AudioPayloadError("Audio data is not valid base64") from exc

    if not audio_bytes:
        raise AudioPayloadError("Uploaded audio is empty")
    return audio_bytes


def resolve_content_type(file_type: str | None, file_name: str | None) -> str:
    """Use the declared MIME type, else guess it from the file name."""

    content_type = (file_type or "").strip()
    if not content_type and file_name:
        guessed_type, _ = mimetypes.guess_type(file_name)
        content_type = guessed_type or ""
    return content_type or _DEFAULT_CONTENT_TYPE


def resolve_file_name(file_name: str | None) -> str:
    cleaned = (file_name or "").strip()
    return cleaned or _DEFAULT_FILE_NAME


def round_duration(duration_seconds: float) -> int:
    """Whole seconds, rounding halves up (2.5 -> 3)."""

    as_decimal = Decimal(str(max(0.0, duration_seconds)))
    return int(as_decimal.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


__all__ = [
    "AudioPayloadError",
    "decode_audio_payload",
    "resolve_content_type",
    "resolve_file_name",
    "round_duration",
]
