"""
Recommendation case rules: turns warning history + current performance into
exactly one corrective action per subject.

Each rule is a ``CaseRule(name, applies, build)``. Rules live in ordered
tuples and are evaluated in sequence; the first rule whose predicate holds
produces the result and evaluation stops there.

Agent rules (AGENT_RULES, evaluated in order — first match wins)
-----------------------------------------------------------------
    C             written >= 2, underperforming              → priority 1, critical
    B             written == 0, verbal >= 2, underperforming → priority 2, critical
    A             written == 0, verbal == 1, underperforming → priority 3
    COACHING_ONLY no active warnings, underperforming,
                  no coaching within the look-back window    → priority 4
    A (first)     no active warnings, underperforming,
                  coached within the look-back window        → priority 3
    MONITOR       everything else                            → priority 5

Leadership rules (LEADERSHIP_RULES)
-----------------------------------
    E   leader holds an active leadership-scoped Verbal Warning  → priority 1
    D   subordinate underperforming >= 2 weeks and the leader
        recorded no action for them                              → priority 2
    (no match → no leadership recommendation)

"Underperforming" for an agent means at least one underperforming week in
the evaluation window.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Callable, Generic, NamedTuple, Optional, TypeVar

from qperform.context import EvaluationContext, resolve_context
from qperform.ledger.warning_ledger import (
    CategoryLike,
    get_warning_status,
    has_recent_coaching,
    is_active,
)
from qperform.models.action import ActionLogEntry
from qperform.models.recommendation import RecommendationResult
from qperform.models.status import WarningStatus
from qperform.taxonomy.action_taxonomy import CaseType, TargetType, WarningType

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CaseRule(NamedTuple, Generic[T]):
    """One named case: a predicate over the inputs and a result builder."""

    name:    str
    applies: Callable[[T], bool]
    build:   Callable[[T], RecommendationResult]


def evaluate_rules(
    rules: Sequence[CaseRule[T]],
    inputs: T,
) -> Optional[RecommendationResult]:
    """Return the result of the first rule whose predicate holds, or ``None``."""
    for rule in rules:
        if rule.applies(inputs):
            logger.debug("Case rule %s matched", rule.name)
            return rule.build(inputs)
    return None


# ── Agent cases ───────────────────────────────────────────────────────────────


class AgentCaseInputs(NamedTuple):
    """Everything the agent rules read.

    Attributes:
        agent_email:          Agent being evaluated.
        warnings:             Active-warning summary in the evaluated category.
        underperforming_weeks: Underperforming weeks in the evaluation window.
        has_recent_coaching:  Coaching logged within the look-back window.
    """

    agent_email:           str
    warnings:              WarningStatus
    underperforming_weeks: int
    has_recent_coaching:   bool

    @property
    def is_underperforming(self) -> bool:
        return self.underperforming_weeks > 0


def _case_c(_: AgentCaseInputs) -> RecommendationResult:
    return RecommendationResult(
        case_type=CaseType.C,
        action="Prepare for Employee Termination",
        is_critical=True,
        notes=(
            "Agent has 2 active Written Warnings and continues to underperform. "
            "CRITICAL: Begin offboarding preparation. Consult HR immediately."
        ),
        requires_leadership_action=True,
        target_type=TargetType.AGENT,
        priority=1,
    )


def _case_b(_: AgentCaseInputs) -> RecommendationResult:
    return RecommendationResult(
        case_type=CaseType.B,
        action="Issue Written Warning",
        is_critical=True,
        notes=(
            "Agent has 2 active Verbal Warnings and continues to underperform. "
            "CRITICAL: Escalate to Written Warning immediately."
        ),
        requires_leadership_action=False,
        target_type=TargetType.AGENT,
        priority=2,
    )


def _case_a(_: AgentCaseInputs) -> RecommendationResult:
    return RecommendationResult(
        case_type=CaseType.A,
        action="Issue 2nd Verbal Warning + Coaching Session",
        is_critical=False,
        notes=(
            "Agent has 1 active Verbal Warning and continues to underperform. "
            "Escalation: 2nd Verbal Warning with mandatory coaching."
        ),
        requires_leadership_action=False,
        target_type=TargetType.AGENT,
        priority=3,
    )


def _coaching_only(_: AgentCaseInputs) -> RecommendationResult:
    return RecommendationResult(
        case_type=CaseType.COACHING_ONLY,
        action="Provide Coaching Session",
        is_critical=False,
        notes=(
            "Agent is underperforming but has no active warnings. "
            "Start with coaching before issuing warnings."
        ),
        requires_leadership_action=False,
        target_type=TargetType.AGENT,
        priority=4,
    )


def _first_verbal(_: AgentCaseInputs) -> RecommendationResult:
    return RecommendationResult(
        case_type=CaseType.A,
        action="Issue Verbal Warning",
        is_critical=False,
        notes=(
            "Agent has received coaching but continues to underperform. "
            "Issue first Verbal Warning."
        ),
        requires_leadership_action=False,
        target_type=TargetType.AGENT,
        priority=3,
    )


def _monitor(_: AgentCaseInputs) -> RecommendationResult:
    return RecommendationResult(
        case_type=CaseType.MONITOR,
        action="Continue Monitoring",
        is_critical=False,
        notes=(
            "Agent is performing within acceptable standards. "
            "Continue regular monitoring."
        ),
        requires_leadership_action=False,
        target_type=TargetType.AGENT,
        priority=5,
    )


AGENT_RULES: tuple[CaseRule[AgentCaseInputs], ...] = (
    CaseRule(
        "C",
        lambda x: x.warnings.written_warnings >= 2 and x.is_underperforming,
        _case_c,
    ),
    CaseRule(
        "B",
        lambda x: (
            x.warnings.written_warnings == 0
            and x.warnings.verbal_warnings >= 2
            and x.is_underperforming
        ),
        _case_b,
    ),
    CaseRule(
        "A",
        lambda x: (
            x.warnings.written_warnings == 0
            and x.warnings.verbal_warnings == 1
            and x.is_underperforming
        ),
        _case_a,
    ),
    CaseRule(
        "COACHING_ONLY",
        lambda x: (
            x.is_underperforming
            and x.warnings.total_active_warnings == 0
            and not x.has_recent_coaching
        ),
        _coaching_only,
    ),
    CaseRule(
        "FIRST_VERBAL",
        lambda x: (
            x.is_underperforming
            and x.warnings.total_active_warnings == 0
            and x.has_recent_coaching
        ),
        _first_verbal,
    ),
    CaseRule("MONITOR", lambda x: True, _monitor),
)


def generate_agent_recommendation(
    agent_email: str,
    category: CategoryLike,
    actions: Sequence[ActionLogEntry],
    underperforming_weeks: int,
    ctx: Optional[EvaluationContext] = None,
) -> RecommendationResult:
    """Choose the single recommendation for one agent.

    Args:
        agent_email: Agent being evaluated.
        category: Warning category whose ledger is read.
        actions: Action-log snapshot.
        underperforming_weeks: Underperforming weeks in the evaluation window.
        ctx: Evaluation context; defaults to today with default thresholds.

    Returns:
        The first matching ``AGENT_RULES`` result (always defined: MONITOR
        matches everything).
    """
    ctx = resolve_context(ctx)
    inputs = AgentCaseInputs(
        agent_email=agent_email,
        warnings=get_warning_status(agent_email, category, actions, ctx.as_of),
        underperforming_weeks=underperforming_weeks,
        has_recent_coaching=has_recent_coaching(
            agent_email, actions, ctx.as_of, ctx.coaching_lookback_days
        ),
    )
    result = evaluate_rules(AGENT_RULES, inputs)
    # MONITOR is a catch-all, so a None here means AGENT_RULES was edited badly
    assert result is not None
    return result


# ── Leadership cases ──────────────────────────────────────────────────────────


class LeadershipCaseInputs(NamedTuple):
    """Everything the leadership rules read.

    Attributes:
        leader_email:           Leader being evaluated.
        agent_email:            Subordinate whose performance triggered the check.
        underperforming_weeks:  Subordinate's underperforming weeks.
        actions_taken:          Actions the leader recorded for the subordinate.
        leader_verbal_warnings: Active leadership-scoped Verbal Warnings held
                                by the leader.
        min_weeks:              Week threshold for case D.
    """

    leader_email:           str
    agent_email:            str
    underperforming_weeks:  int
    actions_taken:          int
    leader_verbal_warnings: int
    min_weeks:              int


def _case_e(x: LeadershipCaseInputs) -> RecommendationResult:
    return RecommendationResult(
        case_type=CaseType.E,
        action="Issue 2nd Leadership Behavior Report + Written Warning to Leader",
        is_critical=True,
        notes=(
            f"Leader {x.leader_email} has failed to follow procedures again within "
            "the Verbal Warning timeframe. Director must provide 2nd Leadership "
            "Behavior Report to AVP and issue Written Warning to leader."
        ),
        requires_leadership_action=True,
        target_type=TargetType.LEADERSHIP,
        priority=1,
    )


def _case_d(x: LeadershipCaseInputs) -> RecommendationResult:
    return RecommendationResult(
        case_type=CaseType.D,
        action="Issue Leadership Behavior Report to AVP + Verbal Warning to Leader",
        is_critical=True,
        notes=(
            f"Leader {x.leader_email} failed to take action on agent {x.agent_email} "
            f"who has been underperforming for {x.underperforming_weeks} weeks. "
            "Director must provide Leadership Behavior Report to AVP and issue "
            "Verbal Warning to leader."
        ),
        requires_leadership_action=True,
        target_type=TargetType.LEADERSHIP,
        priority=2,
    )


LEADERSHIP_RULES: tuple[CaseRule[LeadershipCaseInputs], ...] = (
    CaseRule("E", lambda x: x.leader_verbal_warnings >= 1, _case_e),
    CaseRule(
        "D",
        lambda x: x.underperforming_weeks >= x.min_weeks and x.actions_taken == 0,
        _case_d,
    ),
)


def count_leader_verbal_warnings(
    leader_email: str,
    actions: Sequence[ActionLogEntry],
    ctx: Optional[EvaluationContext] = None,
) -> int:
    """Active Verbal Warnings recorded against ``leader_email`` as a leader."""
    ctx = resolve_context(ctx)
    return sum(
        1
        for a in actions
        if a.agent_email == leader_email
        and a.warning_kind == WarningType.VERBAL
        and a.is_leadership_scoped
        and is_active(a, ctx.as_of)
    )


def generate_leadership_recommendation(
    leader_email: str,
    agent_email: str,
    underperforming_weeks: int,
    actions_taken: int,
    actions: Sequence[ActionLogEntry],
    ctx: Optional[EvaluationContext] = None,
) -> Optional[RecommendationResult]:
    """Check a leader's handling of one subordinate (cases E then D).

    Args:
        leader_email: Leader being evaluated.
        agent_email: Subordinate agent.
        underperforming_weeks: Subordinate's underperforming weeks.
        actions_taken: Actions the leader recorded for the subordinate.
        actions: Action-log snapshot (the leader's own warnings are read
            from here).
        ctx: Evaluation context; defaults to today with default thresholds.

    Returns:
        Case E or D result, or ``None`` if the leader is in good standing.
    """
    ctx = resolve_context(ctx)
    inputs = LeadershipCaseInputs(
        leader_email=leader_email,
        agent_email=agent_email,
        underperforming_weeks=underperforming_weeks,
        actions_taken=actions_taken,
        leader_verbal_warnings=count_leader_verbal_warnings(leader_email, actions, ctx),
        min_weeks=ctx.leadership_underperforming_weeks,
    )
    return evaluate_rules(LEADERSHIP_RULES, inputs)
