"""HTTP surface of the call analysis API."""

from __future__ import annotations

import base64
import json

import pytest
from fastapi.testclient import TestClient

from callsight.config.dependencies import get_analysis_pipeline, get_settings
from callsight.config.settings import AnalysisConfig, Settings
from callsight.main import app
from callsight.pipelines.analysis import CallAnalysisPipeline
from callsight.services.llm_client import UpstreamAnalysisError
from callsight.services.response_contract import (
    FALLBACK_FINDING,
    FALLBACK_SUGGESTION,
    build_fallback_analysis,
)
from callsight.services.transcribe import TranscriptionResult, UpstreamTranscriptionError

AUDIO_B64 = base64.b64encode(b"fake-webm-bytes").decode()


class StubTranscription:
    def __init__(self, result=None, error=None):
        self.result = result or TranscriptionResult("Hi, I'd like to know about your premium plan.", 47.5)
        self.error = error

    async def transcribe(self, audio_bytes, content_type, file_name):
        if self.error is not None:
            raise self.error
        return self.result


class StubChat:
    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error

    async def invoke(self, *, system_prompt, user_prompt, **kwargs):
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def use_pipeline():
    def _install(transcription=None, chat=None):
        pipeline = CallAnalysisPipeline(
            transcription or StubTranscription(),
            chat or StubChat(),
            AnalysisConfig(),
        )
        app.dependency_overrides[get_analysis_pipeline] = lambda: pipeline
        return pipeline

    return _install


def _post_audio(client, **body):
    payload = {"audio": AUDIO_B64, "fileName": "call.webm", "fileType": "audio/webm"}
    payload.update(body)
    return client.post("/transcribe-audio", json=payload)


def test_successful_analysis_returns_structured_and_legacy_fields(client, use_pipeline, analysis_json):
    use_pipeline(chat=StubChat(reply=analysis_json()))

    response = _post_audio(client)

    assert response.status_code == 200
    body = response.json()
    assert body["transcript"] == "Hi, I'd like to know about your premium plan."
    assert body["duration"] == 48
    assert body["anomalies"] == [
        "Asked clear, direct questions",
        "Explained the plan professionally",
        "Addressed pricing up front",
        "Did not confirm the caller's needs before pitching",
    ]
    assert body["suggestions"] == body["analysis"]["suggestions"]
    assert body["analysis"]["score"] == 7.3
    assert body["analysis"]["scoreReasoning"].startswith("Communication")
    assert set(body["analysis"]["anomalies"]) == {"caller", "receiver"}
    assert body["roles"] == {"agentRole": "Receiver", "customerRole": "Caller"}


def test_unparseable_reply_still_returns_200_with_fallback(client, use_pipeline):
    use_pipeline(chat=StubChat(reply="I could not do that."))

    response = _post_audio(client)

    assert response.status_code == 200
    body = response.json()
    assert body["analysis"]["score"] == 5.0
    assert body["analysis"]["transcript"][0]["speaker"] == "System"
    assert body["anomalies"] == [FALLBACK_FINDING, FALLBACK_FINDING]
    assert body["suggestions"] == [FALLBACK_SUGGESTION]


def test_missing_audio_returns_error_shape(client, use_pipeline):
    use_pipeline()

    response = client.post("/transcribe-audio", json={"fileName": "call.webm"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "No audio data provided"
    assert body["transcript"] == "Error during transcription"
    assert body["anomalies"] == []
    assert body["suggestions"] == []
    assert body["duration"] == 0
    assert body["analysis"]["score"] == 0
    assert body["analysis"]["anomalies"]["caller"] == {"positive": [], "negative": []}
    assert "stack" not in body


def test_transcription_failure_returns_error_shape(client, use_pipeline):
    use_pipeline(
        transcription=StubTranscription(
            error=UpstreamTranscriptionError("Whisper API error: 400 - bad audio", status_code=400)
        )
    )

    response = _post_audio(client)

    assert response.status_code == 500
    assert response.json()["error"] == "Whisper API error: 400 - bad audio"


def test_analysis_failure_returns_error_shape(client, use_pipeline):
    use_pipeline(chat=StubChat(error=UpstreamAnalysisError("Analysis API error: 429 - slow down", status_code=429)))

    response = _post_audio(client)

    assert response.status_code == 500
    assert response.json()["error"].startswith("Analysis API error: 429")


def test_debug_mode_includes_stack(client, use_pipeline):
    use_pipeline()
    app.dependency_overrides[get_settings] = lambda: Settings(debug=True)

    response = client.post("/transcribe-audio", json={})

    assert response.status_code == 500
    assert "AudioPayloadError" in response.json()["stack"]


def test_non_json_body_is_rejected(client, use_pipeline):
    use_pipeline()

    response = client.post(
        "/transcribe-audio",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 422


def test_cors_preflight(client):
    response = client.options(
        "/transcribe-audio",
        headers={
            "Origin": "https://dashboard.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]
    allowed_headers = response.headers["access-control-allow-headers"].lower()
    for header in ("authorization", "x-client-info", "apikey", "content-type"):
        assert header in allowed_headers


def test_cors_header_on_actual_response(client, use_pipeline, analysis_json):
    use_pipeline(chat=StubChat(reply=analysis_json()))

    response = client.post(
        "/transcribe-audio",
        json={"audio": AUDIO_B64},
        headers={"Origin": "https://dashboard.example.com"},
    )

    assert response.headers["access-control-allow-origin"] == "*"


def test_roles_endpoint(client, analysis_payload):
    payload = analysis_payload(suggestions=[])
    payload["anomalies"]["caller"]["positive"] = ["Helpful and patient"]
    payload["anomalies"]["receiver"]["positive"] = []

    response = client.post("/roles", json=payload)

    assert response.status_code == 200
    assert response.json() == {"agentRole": "Caller", "customerRole": "Receiver"}


def test_roles_endpoint_rejects_invalid_analysis(client, analysis_payload):
    payload = analysis_payload(score="high")

    assert client.post("/roles", json=payload).status_code == 422


def test_report_download(client, analysis_payload):
    response = client.post(
        "/reports",
        json={"analysis": analysis_payload(), "duration": 95, "transcript": "raw words"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "attachment" in response.headers["content-disposition"]
    text = response.text
    assert "Duration: 1m 35s" in text
    assert "Score: 7.3/10 (Good)" in text
    assert "[00:06] Agent: Of course!" in text
    assert "Raw Transcript:\nraw words" in text


def test_health_and_root(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["status"] == "operational"


def test_metrics_exposes_pipeline_counters(client, use_pipeline, analysis_json):
    use_pipeline(chat=StubChat(reply=analysis_json()))
    _post_audio(client)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "call_analysis_pipeline_outcomes_total" in response.text
    assert "http_requests_total" in response.text


def test_openapi_documents_error_shape(client):
    schema = client.get("/openapi.json").json()

    responses = schema["paths"]["/transcribe-audio"]["post"]["responses"]
    assert "500" in responses
    assert "TranscriptionErrorResponse" in json.dumps(responses["500"])


def test_request_id_is_echoed(client):
    supplied = client.get("/health", headers={"X-Request-ID": "call-1234"})
    generated = client.get("/health")

    assert supplied.headers["x-request-id"] == "call-1234"
    assert len(generated.headers["x-request-id"]) == 32


def test_report_accepts_stored_fallback_analysis(client):
    fallback = build_fallback_analysis("hello there")

    response = client.post("/reports", json={"analysis": fallback.to_payload()})

    assert response.status_code == 200
    assert "[00:00] System: hello there" in response.text


def test_deeply_nested_reply_returns_fallback_not_500(client, use_pipeline):
    use_pipeline(chat=StubChat(reply="[" * 100000))

    response = _post_audio(client)

    assert response.status_code == 200
    assert response.json()["anomalies"] == [FALLBACK_FINDING, FALLBACK_FINDING]
