"""
Explicit, caller-owned evaluation state.

The engine keeps no module-level state. Anything that would otherwise be a
hidden global — the "current" date used for warning expiry, the coaching
look-back window, risk thresholds, the dashboard's active filters — is
carried by one of these objects and passed in by the calling layer.

``EvaluationContext``
    The point in time and rule thresholds for one evaluation. Two calls with
    the same snapshot and the same context return identical results.

``PerformanceFilters``
    Month / year / client / category / task selection applied to a snapshot
    of performance records before it is handed to the engine.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from qperform.models.performance import PerformanceRecord
from qperform.utils.time_utils import month_number, today


class EvaluationContext(BaseModel):
    """Point-in-time settings for one engine evaluation.

    Attributes:
        as_of: Date warnings are tested against (``expiration_date > as_of``)
            and the anchor of the coaching look-back window.
        coaching_lookback_days: A coaching session within this many days
            counts as "recent".
        consecutive_weeks_threshold: Consecutive underperforming weeks that
            make an agent HIGH risk.
        total_weeks_threshold: Total underperforming weeks that make an agent
            at least MEDIUM risk.
        verbal_combo_weeks_threshold: Underperforming weeks that, together
            with 2+ Verbal Warnings, make an agent at least MEDIUM risk.
        leadership_underperforming_weeks: Subordinate underperforming weeks
            after which a leader with no recorded action triggers case D.
    """

    model_config = ConfigDict(frozen=True)

    as_of: date
    coaching_lookback_days: int = 30
    consecutive_weeks_threshold: int = 3
    total_weeks_threshold: int = 3
    verbal_combo_weeks_threshold: int = 2
    leadership_underperforming_weeks: int = 2

    @field_validator(
        "coaching_lookback_days",
        "consecutive_weeks_threshold",
        "total_weeks_threshold",
        "verbal_combo_weeks_threshold",
        "leadership_underperforming_weeks",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"thresholds must be >= 1, got {v}.")
        return v

    @classmethod
    def for_today(cls) -> "EvaluationContext":
        """Default thresholds, evaluated as of today's UTC date."""
        return cls(as_of=today())


def resolve_context(ctx: Optional[EvaluationContext]) -> EvaluationContext:
    """Return ``ctx`` or a fresh default context for today."""
    return ctx if ctx is not None else EvaluationContext.for_today()


class PerformanceFilters(BaseModel):
    """Dashboard filter selection. Unset fields match everything.

    ``month`` accepts a 1-based number or an English month name.
    String fields compare case-insensitively after trimming.
    """

    model_config = ConfigDict(frozen=True)

    month: Optional[Union[int, str]] = None
    year: Optional[int] = None
    client: Optional[str] = None
    category: Optional[str] = None
    task: Optional[str] = None

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: Optional[Union[int, str]]) -> Optional[int]:
        if v is None:
            return None
        if isinstance(v, str):
            stripped = v.strip()
            if not stripped:
                return None
            number = int(stripped) if stripped.isdigit() else month_number(stripped)
            if number is None:
                raise ValueError(f"Unknown month '{v}'.")
            v = number
        if not 1 <= v <= 12:
            raise ValueError(f"month must be in [1, 12], got {v}.")
        return v

    @property
    def is_empty(self) -> bool:
        return all(
            getattr(self, name) is None
            for name in ("month", "year", "client", "category", "task")
        )

    def matches(self, record: PerformanceRecord) -> bool:
        if self.month is not None and record.month_num != self.month:
            return False
        if self.year is not None and record.year_num != self.year:
            return False
        return (
            _text_matches(self.client, record.client)
            and _text_matches(self.category, record.category)
            and _text_matches(self.task, record.task)
        )

    def apply(self, records: Iterable[PerformanceRecord]) -> list[PerformanceRecord]:
        """Return the matching records, preserving input order."""
        return [r for r in records if self.matches(r)]


def _text_matches(wanted: Optional[str], actual: str) -> bool:
    if wanted is None or not wanted.strip():
        return True
    return wanted.strip().lower() == actual.strip().lower()
