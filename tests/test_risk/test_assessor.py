"""
Tests for qperform.risk.assessor — at-risk detection.

What we test
------------
Week counting:
  - [Critical, Normal, Critical] newest-first ⇒ consecutive 1, total 2.
  - consecutive <= total for any input.
  - Records are ordered by start_date, not input order.

determine_at_risk_status():
  - 3 consecutive Critical QA weeks ⇒ HIGH with the streak reason.
  - 2 active Written Warnings ⇒ CRITICAL and requires_immediate_action.
  - 1 Written Warning ⇒ MEDIUM.
  - 2 Verbal Warnings + 2 underperforming weeks ⇒ MEDIUM.
  - A milder later rule never lowers the level.
  - Thresholds come from the EvaluationContext.
  - Production category grades the Production metric.

rank_at_risk_agents():
  - Drops agents with no reasons; orders CRITICAL → LOW; stable for ties.
"""

from __future__ import annotations

from datetime import date, timedelta

from qperform.context import EvaluationContext
from qperform.risk.assessor import (
    consecutive_underperforming_weeks,
    determine_at_risk_status,
    metric_for_category,
    rank_at_risk_agents,
    total_underperforming_weeks,
)
from qperform.taxonomy.action_taxonomy import WarningCategory
from qperform.taxonomy.performance_taxonomy import MetricType, RiskLevel

AGENT = "agent@example.com"
QA_CAT = WarningCategory.SUBSTANDARD_QA
WEEKS = [date(2025, 9, 28), date(2025, 10, 5), date(2025, 10, 12), date(2025, 10, 19)]


def _weeks(make_record, scores, agent=AGENT, metric="kpi_qa"):
    """Records for consecutive weeks, oldest first, one score each."""
    return [
        make_record(agent_email=agent, start=WEEKS[i], **{metric: score})
        for i, score in enumerate(scores)
    ]


class TestWeekCounting:
    def test_streak_broken_by_compliant_week(self, make_record):
        # Oldest → newest: Critical, Normal, Critical.
        records = _weeks(make_record, [90.0, 98.5, 90.0])
        assert consecutive_underperforming_weeks(records, MetricType.QA) == 1
        assert total_underperforming_weeks(records, MetricType.QA) == 2

    def test_order_independent(self, make_record):
        records = list(reversed(_weeks(make_record, [98.5, 90.0, 90.0])))
        assert consecutive_underperforming_weeks(records, MetricType.QA) == 2

    def test_newest_compliant_means_zero_streak(self, make_record):
        records = _weeks(make_record, [90.0, 90.0, 100.0])
        assert consecutive_underperforming_weeks(records, MetricType.QA) == 0

    def test_consecutive_never_exceeds_total(self, make_record):
        for scores in ([90.0], [100.0, 90.0], [90.0, 90.0, 100.0, 90.0]):
            records = _weeks(make_record, scores)
            assert consecutive_underperforming_weeks(records, MetricType.QA) <= (
                total_underperforming_weeks(records, MetricType.QA)
            )

    def test_metric_for_category(self):
        assert metric_for_category(QA_CAT) is MetricType.QA
        assert metric_for_category("Substandard Work - Production") is MetricType.PRODUCTION
        assert metric_for_category("Other") is MetricType.PRODUCTION


class TestDetermineAtRiskStatus:
    def test_three_consecutive_critical_is_high(self, make_record, ctx):
        records = _weeks(make_record, [90.0, 90.0, 90.0])
        status = determine_at_risk_status(AGENT, records, QA_CAT, [], ctx)
        assert status.is_at_risk
        assert status.risk_level is RiskLevel.HIGH
        assert "3 consecutive underperforming weeks" in status.reasons
        assert "3 total underperforming weeks this month" in status.reasons

    def test_two_written_is_critical(self, make_record, make_action, ctx):
        records = _weeks(make_record, [100.0])
        actions = [make_action(action_type="Written Warning")] * 2
        status = determine_at_risk_status(AGENT, records, QA_CAT, actions, ctx)
        assert status.risk_level is RiskLevel.CRITICAL
        assert status.has_multiple_written_warnings
        assert status.requires_immediate_action
        assert status.reasons == (
            "2 active Written Warnings (one more strike = termination)",
        )

    def test_single_written_is_medium(self, make_record, make_action, ctx):
        records = _weeks(make_record, [100.0])
        actions = [make_action(action_type="Written Warning")]
        status = determine_at_risk_status(AGENT, records, QA_CAT, actions, ctx)
        assert status.risk_level is RiskLevel.MEDIUM
        assert status.reasons == ("1 active Written Warning",)
        assert not status.requires_immediate_action

    def test_verbal_combo_is_medium(self, make_record, make_action, ctx):
        records = _weeks(make_record, [90.0, 100.0, 90.0])
        actions = [make_action(), make_action()]
        status = determine_at_risk_status(AGENT, records, QA_CAT, actions, ctx)
        assert status.risk_level is RiskLevel.MEDIUM
        assert status.reasons == ("Multiple Verbal Warnings with ongoing underperformance",)

    def test_high_not_downgraded_by_later_medium_rules(self, make_record, make_action, ctx):
        records = _weeks(make_record, [90.0, 90.0, 90.0])
        actions = [make_action(action_type="Written Warning")]
        status = determine_at_risk_status(AGENT, records, QA_CAT, actions, ctx)
        assert status.risk_level is RiskLevel.HIGH
        assert len(status.reasons) == 3

    def test_compliant_agent_not_at_risk(self, make_record, ctx):
        status = determine_at_risk_status(AGENT, _weeks(make_record, [100.0] * 4), QA_CAT, [], ctx)
        assert not status.is_at_risk
        assert status.risk_level is RiskLevel.LOW
        assert status.reasons == ()

    def test_thresholds_from_context(self, make_record, as_of):
        strict = EvaluationContext(as_of=as_of, consecutive_weeks_threshold=2)
        records = _weeks(make_record, [90.0, 90.0])
        status = determine_at_risk_status(AGENT, records, QA_CAT, [], strict)
        assert status.risk_level is RiskLevel.HIGH

    def test_production_category_grades_production(self, make_record, ctx):
        records = _weeks(make_record, [90.0, 90.0, 90.0], metric="kpi_avg_prod")
        qa = determine_at_risk_status(AGENT, records, QA_CAT, [], ctx)
        prod = determine_at_risk_status(
            AGENT, records, WarningCategory.SUBSTANDARD_PRODUCTION, [], ctx
        )
        assert not qa.is_at_risk
        assert prod.risk_level is RiskLevel.HIGH

    def test_expired_written_warning_ignored(self, make_record, make_action, ctx):
        actions = [make_action(action_type="Written Warning",
                               expiration_date=ctx.as_of - timedelta(days=1))]
        status = determine_at_risk_status(AGENT, _weeks(make_record, [100.0]), QA_CAT, actions, ctx)
        assert not status.is_at_risk


class TestRankAtRiskAgents:
    def test_orders_by_severity_and_drops_compliant(self, make_record, make_action, ctx):
        records = (
            _weeks(make_record, [90.0, 90.0, 90.0], agent="high@example.com")
            + _weeks(make_record, [100.0], agent="ok@example.com")
            + _weeks(make_record, [100.0], agent="critical@example.com")
        )
        actions = [make_action(agent_email="critical@example.com", action_type="Written Warning")] * 2
        ranked = rank_at_risk_agents(records, QA_CAT, actions, ctx)
        assert [a.agent_email for a in ranked] == ["critical@example.com", "high@example.com"]
        assert ranked[0].at_risk_status.risk_level is RiskLevel.CRITICAL

    def test_ties_keep_input_order(self, make_record, ctx):
        records = (
            _weeks(make_record, [90.0, 90.0, 90.0], agent="b@example.com")
            + _weeks(make_record, [90.0, 90.0, 90.0], agent="a@example.com")
        )
        ranked = rank_at_risk_agents(records, QA_CAT, [], ctx)
        assert [a.agent_email for a in ranked] == ["b@example.com", "a@example.com"]

    def test_blank_email_skipped(self, make_record, ctx):
        records = _weeks(make_record, [90.0, 90.0, 90.0], agent="  ")
        assert rank_at_risk_agents(records, QA_CAT, [], ctx) == []

    def test_display_context_from_first_record(self, make_record, ctx):
        records = _weeks(make_record, [90.0, 90.0, 90.0])
        agent = rank_at_risk_agents(records, QA_CAT, [], ctx)[0]
        assert agent.agent_name == "agent"
        assert agent.client == "Acme"
