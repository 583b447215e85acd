"""
Derived status objects produced by the warning ledger and the risk assessor.

None of these are persisted: they are recomputed from the raw snapshot on
every query, so they are plain frozen dataclasses rather than pydantic
models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from qperform.taxonomy.performance_taxonomy import RiskLevel


@dataclass(frozen=True)
class WarningStatus:
    """Active-warning summary for one agent in one warning category.

    Attributes:
        verbal_warnings:        Active Verbal Warnings.
        written_warnings:       Active Written Warnings.
        final_warnings:         Active Final Warnings.
        pip_warnings:           Active PIPs.
        total_active_warnings:  Sum of the four counts above.
        highest_warning_level:  1 (verbal), 2 (written), 3 (final or PIP), 0 (none).
        next_recommended_action: Next step on the disciplinary ladder.
        is_at_risk:             True once any Written Warning is active.
    """

    verbal_warnings:         int
    written_warnings:        int
    final_warnings:          int
    pip_warnings:            int
    total_active_warnings:   int
    highest_warning_level:   int
    next_recommended_action: str
    is_at_risk:              bool


@dataclass(frozen=True)
class ProgressionCheck:
    """Outcome of a warning-progression validation.

    ``message`` is set only when ``is_valid`` is False.
    """

    is_valid: bool
    message:  Optional[str] = None


@dataclass(frozen=True)
class AtRiskStatus:
    """At-risk verdict for one agent in one warning category.

    Attributes:
        is_at_risk:                        Any rule triggered.
        risk_level:                        Max severity over triggered rules.
        reasons:                           Human-readable reason per triggered rule,
                                           in rule order.
        consecutive_underperforming_weeks: Streak counted from the newest week.
        total_underperforming_weeks:       Underperforming weeks in the window.
        has_multiple_written_warnings:     2+ active Written Warnings.
        requires_immediate_action:         Same trigger as above; kept separate so
                                           the UI can key off it directly.
    """

    is_at_risk:                        bool
    risk_level:                        RiskLevel
    reasons:                           tuple[str, ...]
    consecutive_underperforming_weeks: int
    total_underperforming_weeks:       int
    has_multiple_written_warnings:     bool
    requires_immediate_action:         bool


@dataclass(frozen=True)
class AtRiskAgent:
    """An agent flagged by the risk assessor, with display context."""

    agent_email:    str
    agent_name:     str
    client:         str
    category:       str
    at_risk_status: AtRiskStatus


@dataclass(frozen=True)
class AgentMonthlyResults:
    """Week counts for one agent over a reporting month.

    A week is compliant when none of its records is underperforming on
    either metric.
    """

    compliant_weeks: int
    total_weeks:     int
    action_count:    int

    @property
    def underperforming_weeks(self) -> int:
        return self.total_weeks - self.compliant_weeks
