"""
Tests for qperform.aggregation.weekly — per-agent / per-week grouping.

What we test
------------
  - group_by_agent preserves first-seen order and skips blank emails.
  - group_by_week nests records by week_range label.
  - is_week_compliant checks both QA and Production.
  - agent_monthly_results counts compliant weeks and logged actions.
  - unique_week_ranges is de-duplicated and newest first.
"""

from __future__ import annotations

from datetime import date

from qperform.aggregation.weekly import (
    agent_monthly_results,
    group_by_agent,
    group_by_week,
    is_week_compliant,
    unique_week_ranges,
)
from qperform.utils.time_utils import WeekSpan

W1 = date(2025, 10, 5)
W2 = date(2025, 10, 12)


class TestGrouping:
    def test_group_by_agent_order(self, make_record):
        records = [
            make_record(agent_email="b@example.com"),
            make_record(agent_email="a@example.com"),
            make_record(agent_email="b@example.com", start=W2),
        ]
        grouped = group_by_agent(records)
        assert list(grouped) == ["b@example.com", "a@example.com"]
        assert len(grouped["b@example.com"]) == 2

    def test_blank_email_skipped(self, make_record):
        assert group_by_agent([make_record(agent_email="")]) == {}

    def test_group_by_week(self, make_record):
        records = [
            make_record(start=W1, task="Review"),
            make_record(start=W1, task="Audit"),
            make_record(start=W2),
        ]
        weeks = group_by_week(records)["agent@example.com"]
        assert set(weeks) == {"10/05/25 - 10/11/25", "10/12/25 - 10/18/25"}
        assert len(weeks["10/05/25 - 10/11/25"]) == 2


class TestCompliance:
    def test_week_compliant(self, make_record):
        assert is_week_compliant([make_record(kpi_qa=100.0, kpi_avg_prod=100.0)])

    def test_either_metric_breaks_compliance(self, make_record):
        assert not is_week_compliant([make_record(kpi_qa=100.0, kpi_avg_prod=98.0)])
        assert not is_week_compliant([make_record(kpi_qa=97.0, kpi_avg_prod=100.0)])

    def test_one_bad_task_breaks_the_week(self, make_record):
        week = [make_record(task="Review"), make_record(task="Audit", kpi_qa=90.0)]
        assert not is_week_compliant(week)

    def test_agent_monthly_results(self, make_record, make_action):
        records = [make_record(start=W1), make_record(start=W2, kpi_qa=90.0)]
        weeks = group_by_week(records)["agent@example.com"]
        actions = [make_action(), make_action(agent_email="other@example.com")]
        results = agent_monthly_results(weeks, "agent@example.com", actions)
        assert results.compliant_weeks == 1
        assert results.total_weeks == 2
        assert results.underperforming_weeks == 1
        assert results.action_count == 1


def test_unique_week_ranges_newest_first(make_record):
    records = [
        make_record(start=W1),
        make_record(agent_email="b@example.com", start=W1),
        make_record(start=W2),
    ]
    assert unique_week_ranges(records) == [
        WeekSpan(W2, date(2025, 10, 18)),
        WeekSpan(W1, date(2025, 10, 11)),
    ]
