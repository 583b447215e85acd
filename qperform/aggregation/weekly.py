"""
Per-agent and per-week grouping of performance snapshots.

These helpers build the shapes the risk assessor and the recommendation
ranker iterate over. Grouping preserves first-seen order so that batch
outputs are deterministic for a given snapshot. Records with a blank
``agent_email`` are left out of every grouping.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from qperform.classification.thresholds import is_record_underperforming
from qperform.models.action import ActionLogEntry
from qperform.models.performance import PerformanceRecord
from qperform.models.status import AgentMonthlyResults
from qperform.taxonomy.performance_taxonomy import MetricType
from qperform.utils.time_utils import WeekSpan

logger = logging.getLogger(__name__)


def group_by_agent(
    records: Iterable[PerformanceRecord],
) -> dict[str, list[PerformanceRecord]]:
    """Group records by ``agent_email`` in first-seen order."""
    grouped: dict[str, list[PerformanceRecord]] = {}
    skipped = 0
    for record in records:
        if not record.agent_email:
            skipped += 1
            continue
        grouped.setdefault(record.agent_email, []).append(record)
    if skipped:
        logger.debug("Skipped %d record(s) with no agent_email", skipped)
    return grouped


def group_by_week(
    records: Iterable[PerformanceRecord],
) -> dict[str, dict[str, list[PerformanceRecord]]]:
    """Group records by agent, then by ``week_range`` label.

    An agent can have several records per week (one per client/task).
    """
    grouped: dict[str, dict[str, list[PerformanceRecord]]] = {}
    for agent_email, agent_records in group_by_agent(records).items():
        weeks: dict[str, list[PerformanceRecord]] = defaultdict(list)
        for record in agent_records:
            weeks[record.week_range].append(record)
        grouped[agent_email] = dict(weeks)
    return grouped


def is_week_compliant(records_in_week: Iterable[PerformanceRecord]) -> bool:
    """A week is compliant when no record in it underperforms on QA or Production."""
    return not any(
        is_record_underperforming(r, MetricType.QA)
        or is_record_underperforming(r, MetricType.PRODUCTION)
        for r in records_in_week
    )


def agent_monthly_results(
    agent_weeks: dict[str, list[PerformanceRecord]],
    agent_email: str,
    actions: Iterable[ActionLogEntry],
) -> AgentMonthlyResults:
    """Compliant / total week counts and logged action count for one agent.

    Args:
        agent_weeks: One agent's entry from ``group_by_week``.
        agent_email: The agent, used to count action-log entries.
        actions: Action-log snapshot.
    """
    compliant = sum(1 for week in agent_weeks.values() if is_week_compliant(week))
    action_count = sum(1 for a in actions if a.agent_email == agent_email)
    return AgentMonthlyResults(
        compliant_weeks=compliant,
        total_weeks=len(agent_weeks),
        action_count=action_count,
    )


def unique_week_ranges(records: Iterable[PerformanceRecord]) -> list[WeekSpan]:
    """Distinct (start, end) weeks in a snapshot, newest first."""
    seen: dict[tuple, WeekSpan] = {}
    for record in records:
        key = (record.start_date, record.end_date)
        if key not in seen:
            seen[key] = WeekSpan(start=record.start_date, end=record.end_date)
    return sorted(seen.values(), key=lambda w: w.start, reverse=True)
