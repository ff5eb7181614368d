"""Pydantic schemas for the call transcription/analysis endpoints."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from callsight.services.response_contract import CallAnalysis


class TranscriptionRequest(BaseModel):
    """Base64 audio upload as sent by the web client."""

    audio: Optional[str] = Field(None, description="Base64 encoded audio")
    file_name: Optional[str] = Field(None, alias="fileName")
    file_type: Optional[str] = Field(None, alias="fileType")

    model_config = ConfigDict(populate_by_name=True)


class RoleMapResponse(BaseModel):
    agent_role: str = Field(..., alias="agentRole")
    customer_role: str = Field(..., alias="customerRole")

    model_config = ConfigDict(populate_by_name=True)


class TranscriptionResponse(BaseModel):
    """Successful (or recovered) analysis of one recording."""

    transcript: str
    anomalies: List[str] = Field(
        ..., description="Legacy flat list: caller +/- then receiver +/- findings"
    )
    suggestions: List[str]
    duration: int = Field(..., description="Recording length in whole seconds")
    analysis: CallAnalysis
    roles: RoleMapResponse


class TranscriptionErrorResponse(BaseModel):
    """Fatal pipeline failure."""

    error: str
    stack: Optional[str] = None
    transcript: str = "Error during transcription"
    anomalies: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    duration: int = 0
    analysis: Dict[str, Any]


class ReportRequest(BaseModel):
    analysis: CallAnalysis
    duration: int = Field(0, ge=0)
    transcript: str = ""
