"""
Recommendation ranker: evaluates every agent in a snapshot and orders the
results by urgency.

Usage flow
----------
1. generate_all_recommendations(records, actions, category, ctx)
   -> list[AgentRecommendationWithContext]  (one per agent, priority order)

2. generate_all_leadership_recommendations(records, actions, category, leaders, ctx)
   -> list[LeadershipRecommendation]  (only leaders with a case E / D result)

Both batches group records by agent in first-seen order and sort with a
stable key, so agents with equal priority keep their input order and the
same snapshot + context always yields the same list.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Iterable, Optional

from qperform.aggregation.weekly import group_by_agent
from qperform.context import EvaluationContext, resolve_context
from qperform.ledger.warning_ledger import CategoryLike
from qperform.models.action import ActionLogEntry
from qperform.models.performance import PerformanceRecord
from qperform.models.recommendation import (
    AgentRecommendationWithContext,
    RecommendationResult,
)
from qperform.recommendations.rules import (
    generate_agent_recommendation,
    generate_leadership_recommendation,
)
from qperform.risk.assessor import metric_for_category, total_underperforming_weeks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeadershipRecommendation:
    """A leadership case raised against the leader of one agent.

    Attributes:
        leader_email:          Leader the recommendation targets.
        agent_email:           Subordinate whose record triggered the check.
        agent_name:            Subordinate's display name.
        recommendation:        Case E or D result.
        underperforming_weeks: Subordinate's underperforming weeks.
        actions_taken:         Actions the leader logged for the subordinate.
    """

    leader_email:          str
    agent_email:           str
    agent_name:            str
    recommendation:        RecommendationResult
    underperforming_weeks: int
    actions_taken:         int


def generate_all_recommendations(
    records: Iterable[PerformanceRecord],
    actions: Sequence[ActionLogEntry],
    category: CategoryLike,
    ctx: Optional[EvaluationContext] = None,
) -> list[AgentRecommendationWithContext]:
    """One recommendation per agent in the snapshot, most urgent first.

    Args:
        records: Performance snapshot for the evaluation window.
        actions: Action-log snapshot.
        category: Warning category; also selects the metric graded.
        ctx: Evaluation context shared by every agent in the batch.

    Returns:
        ``AgentRecommendationWithContext`` list sorted by priority ascending.
    """
    ctx = resolve_context(ctx)
    actions = list(actions)
    metric = metric_for_category(category)

    results: list[AgentRecommendationWithContext] = []
    for agent_email, agent_records in group_by_agent(records).items():
        underperforming = total_underperforming_weeks(agent_records, metric)
        recommendation = generate_agent_recommendation(
            agent_email, category, actions, underperforming, ctx
        )
        results.append(
            AgentRecommendationWithContext(
                agent_email=agent_email,
                agent_name=agent_records[0].display_name,
                recommendation=recommendation,
                underperforming_weeks=underperforming,
                total_weeks=len(agent_records),
                actions_taken=sum(1 for a in actions if a.agent_email == agent_email),
            )
        )

    results.sort(key=lambda r: r.recommendation.priority)
    critical = sum(1 for r in results if r.recommendation.is_critical)
    logger.info(
        "Generated %d recommendation(s) for %s (%d critical)",
        len(results), category, critical,
    )
    return results


def generate_all_leadership_recommendations(
    records: Iterable[PerformanceRecord],
    actions: Sequence[ActionLogEntry],
    category: CategoryLike,
    leaders: Mapping[str, str],
    ctx: Optional[EvaluationContext] = None,
) -> list[LeadershipRecommendation]:
    """Leadership accountability check across a snapshot.

    ``actions_taken`` for each agent counts the action-log entries about that
    agent whose ``taken_by`` is the agent's leader. Agents with no entry in
    ``leaders`` are skipped, as are leaders in good standing.

    Args:
        records: Performance snapshot for the evaluation window.
        actions: Action-log snapshot.
        category: Warning category; selects the metric graded.
        leaders: Agent email → leader email.
        ctx: Evaluation context shared by every check in the batch.

    Returns:
        ``LeadershipRecommendation`` list sorted by priority ascending.
    """
    ctx = resolve_context(ctx)
    actions = list(actions)
    metric = metric_for_category(category)

    results: list[LeadershipRecommendation] = []
    for agent_email, agent_records in group_by_agent(records).items():
        leader_email = leaders.get(agent_email)
        if not leader_email:
            logger.debug("No leader mapped for %s", agent_email)
            continue

        underperforming = total_underperforming_weeks(agent_records, metric)
        taken = sum(
            1 for a in actions
            if a.agent_email == agent_email and a.taken_by == leader_email
        )
        recommendation = generate_leadership_recommendation(
            leader_email, agent_email, underperforming, taken, actions, ctx
        )
        if recommendation is None:
            continue
        results.append(
            LeadershipRecommendation(
                leader_email=leader_email,
                agent_email=agent_email,
                agent_name=agent_records[0].display_name,
                recommendation=recommendation,
                underperforming_weeks=underperforming,
                actions_taken=taken,
            )
        )

    results.sort(key=lambda r: r.recommendation.priority)
    logger.info("Generated %d leadership recommendation(s) for %s", len(results), category)
    return results
