"""Flat anomaly list for consumers of the pre-structured response contract."""

from __future__ import annotations

from callsight.services.response_contract import CallAnalysis, Party

# caller.positive, caller.negative, receiver.positive, receiver.negative
_LEGACY_ORDER: tuple[tuple[Party, str], ...] = (
    (Party.CALLER, "positive"),
    (Party.CALLER, "negative"),
    (Party.RECEIVER, "positive"),
    (Party.RECEIVER, "negative"),
)


def flatten_anomalies(analysis: CallAnalysis) -> tuple[str, ...]:
    """Concatenate the four anomaly lists in the legacy order.

    The structured ``analysis.anomalies`` stays the source of truth; this is a
    read-only projection.
    """

    flattened: list[str] = []
    for party, polarity in _LEGACY_ORDER:
        bucket = analysis.anomalies.for_party(party)
        flattened.extend(getattr(bucket, polarity))
    return tuple(flattened)


__all__ = ["flatten_anomalies"]
