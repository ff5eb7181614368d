"""Agent/Customer role inference over a finished call analysis.

Pure and deterministic: the rules below only read the analysis' findings and
suggestions, so the presentation layer can call :func:`infer_roles` on any
stored record and get the same answer the pipeline returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from callsight.services.response_contract import CallAnalysis, Party, Speaker

AGENT_SKILL_KEYWORDS: tuple[str, ...] = (
    "professional",
    "helpful",
    "explained",
    "guided",
    "addressed",
)

AGENT_LABEL = "Agent"
CUSTOMER_LABEL = "Customer"


@dataclass(frozen=True)
class RoleMap:
    agent_role: Party
    customer_role: Party

    @classmethod
    def with_agent(cls, agent: Party) -> "RoleMap":
        return cls(agent_role=agent, customer_role=agent.other)

    def to_payload(self) -> dict[str, str]:
        return {
            "agentRole": self.agent_role.value,
            "customerRole": self.customer_role.value,
        }


@dataclass(frozen=True)
class _Evidence:
    caller_has_skills: bool
    receiver_has_skills: bool
    has_suggestions: bool


@dataclass(frozen=True)
class RoleRule:
    name: str
    applies: Callable[[_Evidence], bool]
    agent: Party


def shows_agent_skills(findings: Iterable[str]) -> bool:
    """True when any finding mentions one of the agent-skill keywords."""

    return any(
        keyword in finding.lower()
        for finding in findings
        for keyword in AGENT_SKILL_KEYWORDS
    )


# Evaluated in order; the first matching rule wins.
ROLE_RULES: tuple[RoleRule, ...] = (
    RoleRule(
        name="receiver-skills-with-suggestions",
        applies=lambda ev: ev.has_suggestions
        and ev.receiver_has_skills
        and not ev.caller_has_skills,
        agent=Party.RECEIVER,
    ),
    RoleRule(
        name="caller-skills-only",
        applies=lambda ev: ev.caller_has_skills and not ev.receiver_has_skills,
        agent=Party.CALLER,
    ),
)

# The answering party of a business call is usually the staff member.
DEFAULT_AGENT = Party.RECEIVER


def _collect_evidence(analysis: CallAnalysis) -> _Evidence:
    return _Evidence(
        caller_has_skills=shows_agent_skills(analysis.anomalies.caller.positive),
        receiver_has_skills=shows_agent_skills(analysis.anomalies.receiver.positive),
        has_suggestions=len(analysis.suggestions) > 0,
    )


def matching_rule(analysis: CallAnalysis) -> RoleRule | None:
    """Return the first rule that fires, or ``None`` when the default applies."""

    evidence = _collect_evidence(analysis)
    for rule in ROLE_RULES:
        if rule.applies(evidence):
            return rule
    return None


def infer_roles(analysis: CallAnalysis) -> RoleMap:
    """Decide which party acted as the agent."""

    rule = matching_rule(analysis)
    return RoleMap.with_agent(rule.agent if rule is not None else DEFAULT_AGENT)


def speaker_role_label(speaker: Speaker | Party | str, roles: RoleMap) -> str:
    """Display label for a transcript speaker: Agent, Customer, or the raw tag."""

    value = speaker.value if isinstance(speaker, (Speaker, Party)) else str(speaker)
    if value == roles.agent_role.value:
        return AGENT_LABEL
    if value == roles.customer_role.value:
        return CUSTOMER_LABEL
    return value


__all__ = [
    "AGENT_SKILL_KEYWORDS",
    "DEFAULT_AGENT",
    "ROLE_RULES",
    "RoleMap",
    "RoleRule",
    "infer_roles",
    "matching_rule",
    "shows_agent_skills",
    "speaker_role_label",
]
