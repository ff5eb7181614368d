"""Shared fixtures for the call analysis tests."""

from __future__ import annotations

import copy
import json
from pathlib import Path
import sys
from typing import Any, Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

SAMPLE_ANALYSIS: dict[str, Any] = {
    "objective": "Sales Inquiry",
    "transcript": [
        {"speaker": "Caller", "text": "Hi, I'd like to know about your premium plan.", "timestamp": "00:00"},
        {"speaker": "Receiver", "text": "Of course! It includes priority support and 2TB of storage.", "timestamp": "00:06"},
        {"speaker": "Caller", "text": "How much is it per month?", "timestamp": "00:15"},
        {"speaker": "Receiver", "text": "It's 19.99 a month, with the first month free.", "timestamp": "00:19"},
    ],
    "anomalies": {
        "caller": {
            "positive": ["Asked clear, direct questions"],
            "negative": [],
        },
        "receiver": {
            "positive": ["Explained the plan professionally", "Addressed pricing up front"],
            "negative": ["Did not confirm the caller's needs before pitching"],
        },
    },
    "conclusion": "The caller received the pricing information and seemed interested.",
    "suggestions": ["Ask about the storage you need before choosing a plan"],
    "score": 7.3,
    "scoreReasoning": "Communication 2.1/2.5, objective 1.7/2.0, engagement 1.1/1.5, "
    "anomaly impact 1.4/2.0, context 0.6/1.0, technical 0.4/1.0.",
}


@pytest.fixture
def analysis_payload() -> Callable[..., dict[str, Any]]:
    """Factory returning a deep copy of a valid analysis, with top-level overrides."""

    def _build(**overrides: Any) -> dict[str, Any]:
        payload = copy.deepcopy(SAMPLE_ANALYSIS)
        payload.update(overrides)
        return payload

    return _build


@pytest.fixture
def analysis_json(analysis_payload) -> Callable[..., str]:
    def _build(**overrides: Any) -> str:
        return json.dumps(analysis_payload(**overrides))

    return _build
