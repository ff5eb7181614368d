from __future__ import annotations

from callsight.pipelines.analysis.legacy import flatten_anomalies
from callsight.services.response_contract import (
    FALLBACK_FINDING,
    CallAnalysis,
    build_fallback_analysis,
)


def test_flatten_uses_fixed_party_and_polarity_order(analysis_payload):
    payload = analysis_payload()
    payload["anomalies"] = {
        "caller": {"positive": ["c+1", "c+2"], "negative": ["c-1"]},
        "receiver": {"positive": ["r+1"], "negative": ["r-1", "r-2", "r-3"]},
    }
    analysis = CallAnalysis.from_data(payload)

    flattened = flatten_anomalies(analysis)

    assert flattened == ("c+1", "c+2", "c-1", "r+1", "r-1", "r-2", "r-3")


def test_flatten_length_is_sum_of_lists(analysis_json):
    analysis = CallAnalysis.from_json(analysis_json())
    buckets = analysis.anomalies

    expected = sum(
        len(bucket.positive) + len(bucket.negative)
        for bucket in (buckets.caller, buckets.receiver)
    )

    assert len(flatten_anomalies(analysis)) == expected


def test_flatten_empty_buckets(analysis_payload):
    payload = analysis_payload()
    empty = {"positive": [], "negative": []}
    payload["anomalies"] = {"caller": dict(empty), "receiver": dict(empty)}

    assert flatten_anomalies(CallAnalysis.from_data(payload)) == ()


def test_flatten_fallback_has_both_error_markers():
    assert flatten_anomalies(build_fallback_analysis("x")) == (FALLBACK_FINDING, FALLBACK_FINDING)
