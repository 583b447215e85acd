"""Tests for performance taxonomy — level ordering and risk severity."""

from __future__ import annotations

from qperform.taxonomy.performance_taxonomy import (
    UNDERPERFORMING_LEVELS,
    MetricType,
    PerformanceLevel,
    RiskLevel,
    max_risk,
)


class TestPerformanceLevel:
    def test_rank_orders_critical_to_great(self):
        ordered = sorted(PerformanceLevel, key=lambda lv: lv.rank)
        assert ordered == [
            PerformanceLevel.CRITICAL,
            PerformanceLevel.LOW,
            PerformanceLevel.NORMAL,
            PerformanceLevel.GOOD,
            PerformanceLevel.GREAT,
        ]

    def test_underperforming_levels(self):
        assert UNDERPERFORMING_LEVELS == {PerformanceLevel.LOW, PerformanceLevel.CRITICAL}

    def test_metric_values(self):
        assert MetricType.QA == "QA"
        assert MetricType.PRODUCTION == "Production"


class TestRiskLevel:
    def test_sort_order_puts_critical_first(self):
        ordered = sorted(RiskLevel, key=lambda r: r.sort_order)
        assert ordered == [RiskLevel.CRITICAL, RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW]

    def test_max_risk_never_downgrades(self):
        assert max_risk(RiskLevel.HIGH, RiskLevel.MEDIUM) is RiskLevel.HIGH
        assert max_risk(RiskLevel.MEDIUM, RiskLevel.CRITICAL) is RiskLevel.CRITICAL
        assert max_risk(RiskLevel.LOW, RiskLevel.LOW) is RiskLevel.LOW
