"""FastAPI dependencies wiring configuration into the pipeline components."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from callsight.pipelines.analysis import CallAnalysisPipeline
from callsight.services.llm_client import ChatCompletionClient
from callsight.services.transcribe import TranscriptionService

from .settings import Settings, settings


def get_settings() -> Settings:
    """Return the process-wide, read-only settings instance."""

    return settings


SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_analysis_pipeline(app_settings: SettingsDep) -> CallAnalysisPipeline:
    """Build the pipeline from explicitly injected configuration."""

    return CallAnalysisPipeline(
        transcription_service=TranscriptionService(
            app_settings.openai,
            app_settings.transcription,
        ),
        llm_client=ChatCompletionClient(
            app_settings.openai,
            app_settings.analysis,
        ),
        analysis_config=app_settings.analysis,
    )


PipelineDep = Annotated[CallAnalysisPipeline, Depends(get_analysis_pipeline)]
