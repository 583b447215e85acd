"""
Shared pytest fixtures for the QPerform test suite.

Provides:
  - ``as_of`` / ``ctx``: a pinned evaluation date (2025-10-31) and the
    matching default ``EvaluationContext``. Every engine test passes these
    explicitly so results never depend on the machine clock.
  - ``make_record`` / ``make_action``: factories for ``PerformanceRecord``
    and ``ActionLogEntry`` with sensible defaults; override any field by
    keyword.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable

import pytest

from qperform.context import EvaluationContext
from qperform.models.action import ActionLogEntry
from qperform.models.performance import PerformanceRecord
from qperform.utils.time_utils import attribute_week, format_week_range

AS_OF = date(2025, 10, 31)


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def ctx() -> EvaluationContext:
    return EvaluationContext(as_of=AS_OF)


def build_record(
    agent_email: str = "agent@example.com",
    start: date = date(2025, 10, 5),
    kpi_qa: float | None = 100.0,
    kpi_avg_prod: float | None = 100.0,
    **overrides,
) -> PerformanceRecord:
    """One agent-week; month/year attribution follows the majority-of-days rule."""
    end = start + timedelta(days=6)
    ref = attribute_week(start, end)
    fields = {
        "agent_email": agent_email,
        "agent_name": overrides.pop("agent_name", None),
        "client": "Acme",
        "category": "Claims",
        "task": "Review",
        "kpi_qa": kpi_qa,
        "kpi_avg_prod": kpi_avg_prod,
        "week_range": format_week_range(start, end),
        "start_date": start,
        "end_date": end,
        "month_num": ref.month,
        "month_name": ref.name,
        "year_num": ref.year,
    }
    fields.update(overrides)
    return PerformanceRecord(**fields)


def build_action(
    agent_email: str = "agent@example.com",
    action_type: str = "Verbal Warning",
    action_date: date = date(2025, 10, 1),
    warning_type: str | None = "Substandard Work - QA",
    **overrides,
) -> ActionLogEntry:
    """One action-log entry; expiration defaults to none (permanent)."""
    fields = {
        "agent_email": agent_email,
        "action_type": action_type,
        "action_date": action_date,
        "warning_type": warning_type,
        "taken_by": "lead@example.com",
    }
    fields.update(overrides)
    return ActionLogEntry(**fields)


@pytest.fixture
def make_record() -> Callable[..., PerformanceRecord]:
    return build_record


@pytest.fixture
def make_action() -> Callable[..., ActionLogEntry]:
    return build_action
