"""
Performance taxonomy for weekly agent metrics.

Three enums describe how a week of work is graded:
  - ``MetricType``       — the *what*: which KPI is being graded?
  - ``PerformanceLevel`` — the *how well*: five ordered grades per metric.
  - ``RiskLevel``        — the *how worried*: aggregate at-risk severity.

Both ordered enums expose a ``rank`` so callers can compare members without
relying on declaration order.

This module has NO imports from any other ``qperform`` package.
"""

from enum import StrEnum


class MetricType(StrEnum):
    """KPI family a score belongs to."""

    QA = "QA"
    """Quality-assurance audit score, in percent."""

    PRODUCTION = "Production"
    """Average production against target, in percent."""


class PerformanceLevel(StrEnum):
    """Five-level weekly grade, ordered ``Critical < Low < Normal < Good < Great``."""

    CRITICAL = "Critical"
    """Well below target; counts as underperformance."""

    LOW = "Low"
    """Just below target; counts as underperformance."""

    NORMAL = "Normal"
    """At target."""

    GOOD = "Good"
    """Above target."""

    GREAT = "Great"
    """Top band."""

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]


_LEVEL_RANK: dict[PerformanceLevel, int] = {
    PerformanceLevel.CRITICAL: 0,
    PerformanceLevel.LOW:      1,
    PerformanceLevel.NORMAL:   2,
    PerformanceLevel.GOOD:     3,
    PerformanceLevel.GREAT:    4,
}

UNDERPERFORMING_LEVELS: frozenset[PerformanceLevel] = frozenset({
    PerformanceLevel.LOW,
    PerformanceLevel.CRITICAL,
})


class RiskLevel(StrEnum):
    """At-risk severity, ordered ``LOW < MEDIUM < HIGH < CRITICAL``."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        """0 for LOW up to 3 for CRITICAL."""
        return _RISK_RANK[self]

    @property
    def sort_order(self) -> int:
        """1 for CRITICAL up to 4 for LOW; used to list the most severe first."""
        return 4 - _RISK_RANK[self]


_RISK_RANK: dict[RiskLevel, int] = {
    RiskLevel.LOW:      0,
    RiskLevel.MEDIUM:   1,
    RiskLevel.HIGH:     2,
    RiskLevel.CRITICAL: 3,
}


def max_risk(a: RiskLevel, b: RiskLevel) -> RiskLevel:
    """Return the more severe of two risk levels."""
    return a if a.rank >= b.rank else b
