"""Pydantic schemas used as views in the MVC architecture."""

from .calls import (
    ReportRequest,
    RoleMapResponse,
    TranscriptionErrorResponse,
    TranscriptionRequest,
    TranscriptionResponse,
)
from .common import ErrorResponse

__all__ = [
    "ErrorResponse",
    "ReportRequest",
    "RoleMapResponse",
    "TranscriptionErrorResponse",
    "TranscriptionRequest",
    "TranscriptionResponse",
]
