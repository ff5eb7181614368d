"""Call analysis pipeline package.

Modules are organised by the order in which `/transcribe-audio` executes:

1. `ingestion` – decode and describe the uploaded audio.
2. `transcription` – obtain transcript text and duration.
3. `prompts` – assemble the analysis system/user prompts.
4. `llm` – call the chat model and validate (or replace) its response.
5. `roles` / `legacy` – derived views over the validated analysis.
6. `flow` – the orchestrator tying the stages together.

`report` renders a finished analysis as a plain-text document.
"""

from .flow import CallAnalysisPipeline, PipelineError, PipelineStage
from .ingestion import AudioPayloadError, decode_audio_payload, resolve_content_type, round_duration
from .legacy import flatten_anomalies
from .llm import call_analysis_llm, parse_analysis
from .prompts import build_analysis_request
from .report import quality_band, render_report
from .roles import RoleMap, infer_roles, speaker_role_label
from .transcription import transcribe_audio
from .types import AnalysisOutcome, AnalysisRequest, PipelineResult, PipelineState

__all__ = [
    "AnalysisOutcome",
    "AnalysisRequest",
    "AudioPayloadError",
    "CallAnalysisPipeline",
    "PipelineError",
    "PipelineResult",
    "PipelineStage",
    "PipelineState",
    "RoleMap",
    "build_analysis_request",
    "call_analysis_llm",
    "decode_audio_payload",
    "flatten_anomalies",
    "infer_roles",
    "parse_analysis",
    "quality_band",
    "render_report",
    "resolve_content_type",
    "round_duration",
    "speaker_role_label",
    "transcribe_audio",
]
