"""Agent/Customer inference from finding lists."""

from __future__ import annotations

import pytest

from callsight.pipelines.analysis.roles import (
    DEFAULT_AGENT,
    RoleMap,
    infer_roles,
    matching_rule,
    shows_agent_skills,
    speaker_role_label,
)
from callsight.services.response_contract import (
    CallAnalysis,
    Party,
    Speaker,
    build_fallback_analysis,
)


@pytest.fixture
def make_analysis(analysis_payload):
    def _build(caller_positive, receiver_positive, suggestions):
        payload = analysis_payload(suggestions=suggestions)
        payload["anomalies"]["caller"]["positive"] = caller_positive
        payload["anomalies"]["receiver"]["positive"] = receiver_positive
        return CallAnalysis.from_data(payload)

    return _build


def test_caller_with_agent_skills_is_agent_even_without_suggestions(make_analysis):
    analysis = make_analysis(
        caller_positive=["explained the refund process professionally"],
        receiver_positive=[],
        suggestions=[],
    )

    roles = infer_roles(analysis)

    assert roles.agent_role is Party.CALLER
    assert roles.customer_role is Party.RECEIVER
    assert matching_rule(analysis).name == "caller-skills-only"


def test_receiver_with_agent_skills_and_suggestions_is_agent(make_analysis):
    analysis = make_analysis(
        caller_positive=["Stayed calm"],
        receiver_positive=["Guided the customer through setup"],
        suggestions=["Prepare the account number before calling"],
    )

    assert infer_roles(analysis) == RoleMap(Party.RECEIVER, Party.CALLER)
    assert matching_rule(analysis).name == "receiver-skills-with-suggestions"


def test_receiver_skills_without_suggestions_falls_back_to_default(make_analysis):
    analysis = make_analysis(
        caller_positive=[],
        receiver_positive=["Very helpful tone"],
        suggestions=[],
    )

    assert matching_rule(analysis) is None
    assert infer_roles(analysis).agent_role is DEFAULT_AGENT is Party.RECEIVER


@pytest.mark.parametrize(
    "caller_positive, receiver_positive",
    [
        (["Professional greeting"], ["Addressed every concern"]),
        ([], []),
        (["Polite"], ["Friendly"]),
    ],
)
def test_both_or_neither_defaults_to_receiver(make_analysis, caller_positive, receiver_positive):
    analysis = make_analysis(caller_positive, receiver_positive, suggestions=["Follow up by email"])

    roles = infer_roles(analysis)

    assert roles.agent_role is Party.RECEIVER
    assert roles.customer_role is Party.CALLER


def test_keyword_match_is_case_insensitive():
    assert shows_agent_skills(["PROFESSIONAL demeanour"])
    assert shows_agent_skills(["Clearly EXPLAINED the options"])
    assert not shows_agent_skills(["Asked good questions", "Was patient"])
    assert not shows_agent_skills([])


def test_inference_is_deterministic(make_analysis):
    analysis = make_analysis(["Helpful"], [], [])

    results = {infer_roles(analysis) for _ in range(5)}

    assert results == {RoleMap(Party.CALLER, Party.RECEIVER)}


def test_inference_does_not_modify_the_analysis(make_analysis):
    analysis = make_analysis(["Helpful"], ["Professional"], ["Be on time"])
    before = analysis.to_payload()

    infer_roles(analysis)

    assert analysis.to_payload() == before


def test_fallback_analysis_gets_default_roles():
    roles = infer_roles(build_fallback_analysis("anything"))

    assert roles.agent_role is Party.RECEIVER


def test_role_map_payload_and_labels():
    roles = RoleMap.with_agent(Party.CALLER)

    assert roles.to_payload() == {"agentRole": "Caller", "customerRole": "Receiver"}
    assert speaker_role_label(Speaker.CALLER, roles) == "Agent"
    assert speaker_role_label("Receiver", roles) == "Customer"
    assert speaker_role_label(Speaker.SYSTEM, roles) == "System"
