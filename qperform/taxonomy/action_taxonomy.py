"""
Action-log taxonomy: disciplinary warnings, action categories and the
recommendation vocabulary.

Action-log entries arrive with a free-form ``action_type`` string. Rather than
inferring meaning by substring (``"coaching" in action_type``), every label the
engine understands is listed here in a closed table:

  - ``WarningType``     — the five progressive warning labels.
  - ``ActionCategory``  — WARNING / COACHING / OTHER, derived from the label.
  - ``WarningCategory`` — what the warning was issued for. Leadership-scoped
                          categories mark entries whose subject is a leader.
  - ``SubjectRole``     — explicit AGENT / LEADER tag on an entry.

``CaseType`` and ``TargetType`` name the outputs of the recommendation rules.

Any label not in these tables parses to ``None`` (or ``ActionCategory.OTHER``)
and is simply excluded from warning counts.

This module has NO imports from any other ``qperform`` package.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional


class WarningType(StrEnum):
    """Progressive disciplinary warning labels, as written in the action log."""

    VERBAL = "Verbal Warning"
    WRITTEN = "Written Warning"
    FINAL = "Final Warning"
    PIP = "PIP"
    """Performance Improvement Plan; shares progression order with FINAL."""
    TERMINATION = "Termination"

    @classmethod
    def parse(cls, label: Optional[str]) -> Optional["WarningType"]:
        """Exact (whitespace-trimmed) label match, or ``None``."""
        if not label:
            return None
        try:
            return cls(label.strip())
        except ValueError:
            return None


class WarningCategory(StrEnum):
    """Reason a warning was issued (the log's ``warning_type`` column)."""

    SUBSTANDARD_QA = "Substandard Work - QA"
    SUBSTANDARD_PRODUCTION = "Substandard Work - Production"
    OTHER = "Other"
    LEADERSHIP_BEHAVIOR = "Leadership Behavior"
    """Leader failed to follow escalation procedure (cases D and E)."""

    @property
    def is_leadership_scoped(self) -> bool:
        return self in LEADERSHIP_CATEGORIES

    @classmethod
    def parse(cls, label: Optional[str]) -> Optional["WarningCategory"]:
        if not label:
            return None
        try:
            return cls(label.strip())
        except ValueError:
            return None


LEADERSHIP_CATEGORIES: frozenset[WarningCategory] = frozenset({
    WarningCategory.LEADERSHIP_BEHAVIOR,
})


class ActionCategory(StrEnum):
    """Coarse kind of an action-log entry."""

    WARNING = "warning"
    COACHING = "coaching"
    OTHER = "other"

    @classmethod
    def from_action_type(cls, action_type: Optional[str]) -> "ActionCategory":
        if WarningType.parse(action_type) is not None:
            return cls.WARNING
        if action_type and action_type.strip().lower() in COACHING_LABELS:
            return cls.COACHING
        return cls.OTHER


# Lower-cased labels the dashboard records for coaching sessions.
COACHING_LABELS: frozenset[str] = frozenset({
    "coaching",
    "coaching session",
})


class SubjectRole(StrEnum):
    """Who an action-log entry is about."""

    AGENT = "Agent"
    LEADER = "Leader"


class CaseType(StrEnum):
    """Recommendation case labels."""

    A = "A"
    """1 active Verbal Warning + underperforming (also the first-verbal step)."""
    B = "B"
    """2+ active Verbal Warnings, no Written, underperforming."""
    C = "C"
    """2+ active Written Warnings, underperforming."""
    D = "D"
    """Leader took no action on a subordinate underperforming 2+ weeks."""
    E = "E"
    """Leader already holds an active leadership Verbal Warning."""
    COACHING_ONLY = "COACHING_ONLY"
    MONITOR = "MONITOR"


class TargetType(StrEnum):
    """Who a recommendation asks someone to act on."""

    AGENT = "Agent"
    LEADERSHIP = "Leadership"
