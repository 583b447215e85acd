"""
Tests for qperform.context — EvaluationContext and PerformanceFilters.

What we test
------------
EvaluationContext:
  - Defaults; thresholds below 1 rejected; frozen.
  - resolve_context() returns the given context unchanged.

PerformanceFilters:
  - Empty filters match everything.
  - month accepts numbers, digit strings and English names.
  - Text fields compare case-insensitively.
"""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from qperform.context import EvaluationContext, PerformanceFilters, resolve_context


class TestEvaluationContext:
    def test_defaults(self, as_of):
        ctx = EvaluationContext(as_of=as_of)
        assert ctx.coaching_lookback_days == 30
        assert ctx.consecutive_weeks_threshold == 3
        assert ctx.total_weeks_threshold == 3
        assert ctx.verbal_combo_weeks_threshold == 2
        assert ctx.leadership_underperforming_weeks == 2

    def test_zero_threshold_rejected(self, as_of):
        with pytest.raises(ValidationError):
            EvaluationContext(as_of=as_of, total_weeks_threshold=0)

    def test_frozen(self, ctx):
        with pytest.raises(ValidationError):
            ctx.as_of = date(2020, 1, 1)

    def test_resolve_context(self, ctx):
        assert resolve_context(ctx) is ctx
        assert isinstance(resolve_context(None).as_of, date)


class TestPerformanceFilters:
    def test_empty_matches_all(self, make_record):
        filters = PerformanceFilters()
        assert filters.is_empty
        assert filters.matches(make_record())

    @pytest.mark.parametrize("month", [10, "10", "October", "october"])
    def test_month_forms(self, month):
        assert PerformanceFilters(month=month).month == 10

    def test_unknown_month_rejected(self):
        with pytest.raises(ValidationError):
            PerformanceFilters(month="Smarch")

    def test_month_out_of_range(self):
        with pytest.raises(ValidationError):
            PerformanceFilters(month=13)

    def test_apply(self, make_record):
        records = [
            make_record(start=date(2025, 10, 5), client="Acme"),
            make_record(start=date(2025, 10, 5), client="Globex"),
            make_record(start=date(2025, 9, 7), client="Acme"),
        ]
        kept = PerformanceFilters(month="October", year=2025, client=" acme ").apply(records)
        assert len(kept) == 1
        assert kept[0].client == "Acme"
        assert kept[0].month_num == 10
