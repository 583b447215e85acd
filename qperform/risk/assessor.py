"""
At-risk detection: combines weekly grades with the warning ledger.

Week counting
-------------
consecutive : records sorted newest-first by ``start_date``; count while the
              week is underperforming, stop at the first compliant week.
              An older violation behind a compliant week does not extend
              the streak.
total       : underperforming records in the window, in any order.

Risk rules (all evaluated; each contributes a reason)
-----------------------------------------------------
    1. consecutive >= 3                              → HIGH
    2. total >= 3                                    → at least MEDIUM
    3. active Written Warnings >= 2                  → CRITICAL, immediate action
    4. active Written Warnings == 1                  → at least MEDIUM
    5. active Verbal Warnings >= 2 and
       (consecutive >= 2 or total >= 2)              → at least MEDIUM

The verdict's level is the maximum severity over the triggered rules; a
later, milder rule never lowers it. Thresholds for rules 1, 2 and 5 come
from the ``EvaluationContext``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Callable, Iterable, NamedTuple, Optional

from qperform.aggregation.weekly import group_by_agent
from qperform.classification.thresholds import is_record_underperforming
from qperform.context import EvaluationContext, resolve_context
from qperform.ledger.warning_ledger import CategoryLike, get_warning_status
from qperform.models.action import ActionLogEntry
from qperform.models.performance import PerformanceRecord
from qperform.models.status import AtRiskAgent, AtRiskStatus, WarningStatus
from qperform.taxonomy.action_taxonomy import WarningCategory
from qperform.taxonomy.performance_taxonomy import MetricType, RiskLevel, max_risk

logger = logging.getLogger(__name__)


def metric_for_category(category: CategoryLike) -> MetricType:
    """QA for ``Substandard Work - QA``; Production for every other category."""
    label = category.value if isinstance(category, WarningCategory) else category.strip()
    if label == WarningCategory.SUBSTANDARD_QA.value:
        return MetricType.QA
    return MetricType.PRODUCTION


def consecutive_underperforming_weeks(
    records: Iterable[PerformanceRecord],
    metric: MetricType,
) -> int:
    """Length of the underperforming streak ending at the most recent week."""
    newest_first = sorted(records, key=lambda r: r.start_date, reverse=True)
    streak = 0
    for record in newest_first:
        if not is_record_underperforming(record, metric):
            break
        streak += 1
    return streak


def total_underperforming_weeks(
    records: Iterable[PerformanceRecord],
    metric: MetricType,
) -> int:
    return sum(1 for r in records if is_record_underperforming(r, metric))


class _RiskInputs(NamedTuple):
    consecutive: int
    total:       int
    warnings:    WarningStatus
    ctx:         EvaluationContext


class _RiskRule(NamedTuple):
    name:     str
    severity: RiskLevel
    applies:  Callable[[_RiskInputs], bool]
    reason:   Callable[[_RiskInputs], str]


RISK_RULES: tuple[_RiskRule, ...] = (
    _RiskRule(
        "consecutive_weeks",
        RiskLevel.HIGH,
        lambda x: x.consecutive >= x.ctx.consecutive_weeks_threshold,
        lambda x: f"{x.consecutive} consecutive underperforming weeks",
    ),
    _RiskRule(
        "total_weeks",
        RiskLevel.MEDIUM,
        lambda x: x.total >= x.ctx.total_weeks_threshold,
        lambda x: f"{x.total} total underperforming weeks this month",
    ),
    _RiskRule(
        "multiple_written_warnings",
        RiskLevel.CRITICAL,
        lambda x: x.warnings.written_warnings >= 2,
        lambda x: (
            f"{x.warnings.written_warnings} active Written Warnings "
            "(one more strike = termination)"
        ),
    ),
    _RiskRule(
        "single_written_warning",
        RiskLevel.MEDIUM,
        lambda x: x.warnings.written_warnings == 1,
        lambda x: "1 active Written Warning",
    ),
    _RiskRule(
        "verbal_warnings_with_underperformance",
        RiskLevel.MEDIUM,
        lambda x: x.warnings.verbal_warnings >= 2 and (
            x.consecutive >= x.ctx.verbal_combo_weeks_threshold
            or x.total >= x.ctx.verbal_combo_weeks_threshold
        ),
        lambda x: "Multiple Verbal Warnings with ongoing underperformance",
    ),
)


def determine_at_risk_status(
    agent_email: str,
    records: Sequence[PerformanceRecord],
    category: CategoryLike,
    actions: Sequence[ActionLogEntry],
    ctx: Optional[EvaluationContext] = None,
) -> AtRiskStatus:
    """At-risk verdict for one agent in one warning category.

    Args:
        agent_email: Agent being assessed.
        records: The agent's weekly records for the evaluation window.
        category: Warning category; also selects the metric (QA vs Production).
        actions: Action-log snapshot.
        ctx: Evaluation context; defaults to today with default thresholds.

    Returns:
        ``AtRiskStatus`` with every triggered rule's reason.
    """
    ctx = resolve_context(ctx)
    metric = metric_for_category(category)
    inputs = _RiskInputs(
        consecutive=consecutive_underperforming_weeks(records, metric),
        total=total_underperforming_weeks(records, metric),
        warnings=get_warning_status(agent_email, category, actions, ctx.as_of),
        ctx=ctx,
    )

    risk_level = RiskLevel.LOW
    reasons: list[str] = []
    for rule in RISK_RULES:
        if rule.applies(inputs):
            risk_level = max_risk(risk_level, rule.severity)
            reasons.append(rule.reason(inputs))
            logger.debug("Risk rule %s fired for %s", rule.name, agent_email)

    multiple_written = inputs.warnings.written_warnings >= 2
    return AtRiskStatus(
        is_at_risk=bool(reasons),
        risk_level=risk_level,
        reasons=tuple(reasons),
        consecutive_underperforming_weeks=inputs.consecutive,
        total_underperforming_weeks=inputs.total,
        has_multiple_written_warnings=multiple_written,
        requires_immediate_action=multiple_written,
    )


def rank_at_risk_agents(
    records: Iterable[PerformanceRecord],
    category: CategoryLike,
    actions: Sequence[ActionLogEntry],
    ctx: Optional[EvaluationContext] = None,
) -> list[AtRiskAgent]:
    """All at-risk agents in a snapshot, most severe first.

    Records are grouped by agent in first-seen order (blank emails are
    skipped). Agents with no triggered rule are dropped. The sort is stable,
    so agents of equal severity keep their input order.

    Args:
        records: Performance snapshot for the evaluation window.
        category: Warning category to assess.
        actions: Action-log snapshot.
        ctx: Evaluation context shared by every agent in the batch.

    Returns:
        ``AtRiskAgent`` list ordered CRITICAL → HIGH → MEDIUM → LOW.
    """
    ctx = resolve_context(ctx)
    actions = list(actions)

    flagged: list[AtRiskAgent] = []
    for agent_email, agent_records in group_by_agent(records).items():
        status = determine_at_risk_status(agent_email, agent_records, category, actions, ctx)
        if not status.is_at_risk:
            continue
        first = agent_records[0]
        flagged.append(
            AtRiskAgent(
                agent_email=agent_email,
                agent_name=first.display_name,
                client=first.client,
                category=first.category,
                at_risk_status=status,
            )
        )

    logger.info("%d at-risk agent(s) in %s", len(flagged), category)
    return sorted(flagged, key=lambda a: a.at_risk_status.risk_level.sort_order)
