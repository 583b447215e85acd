"""
Warning ledger: active-warning accounting over an action-log snapshot.

Every query recomputes from the raw entries it is given; there is no cache
and nothing is written back to the entries.

Warning lifecycle
-----------------
    type             expires after   progression order
    Verbal Warning        90 days            1
    Written Warning      180 days            2
    Final Warning        365 days            3
    PIP                   90 days            3
    Termination         permanent            4

An entry is *active* when it has not been explicitly deactivated
(``is_active is False``) and either has no expiration date or expires after
the evaluation date. The expiration date itself is fixed when the warning
is issued (``compute_expiration``); it is never recomputed from the
evaluation date.

Progression
-----------
Warnings cannot skip levels: the first active warning in a category must be
a Verbal Warning, and a new warning may be at most one order above the
highest active one.

Only entries whose ``action_type`` is one of the five warning labels count
as warnings. Coaching sessions and free-form actions are ignored here except
by ``has_recent_coaching``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Union

from qperform.models.action import ActionLogEntry
from qperform.models.status import ProgressionCheck, WarningStatus
from qperform.taxonomy.action_taxonomy import ActionCategory, WarningCategory, WarningType
from qperform.utils.time_utils import today

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WarningConfig:
    """Lifecycle settings for one warning type.

    ``expiration_days == 0`` means the warning never expires.
    """

    type:              WarningType
    expiration_days:   int
    progression_order: int

    @property
    def is_permanent(self) -> bool:
        return self.expiration_days == 0


WARNING_CONFIGS: dict[WarningType, WarningConfig] = {
    WarningType.VERBAL:      WarningConfig(WarningType.VERBAL,      90,  1),
    WarningType.WRITTEN:     WarningConfig(WarningType.WRITTEN,     180, 2),
    WarningType.FINAL:       WarningConfig(WarningType.FINAL,       365, 3),
    WarningType.PIP:         WarningConfig(WarningType.PIP,         90,  3),
    WarningType.TERMINATION: WarningConfig(WarningType.TERMINATION, 0,   4),
}

# next_recommended_action labels, in the order they are checked
NEXT_ACTION_TERMINATION = "Prepare for Termination"
NEXT_ACTION_FINAL_OR_PIP = "Consider Final Warning or PIP"
NEXT_ACTION_WRITTEN = "Issue Written Warning"
NEXT_ACTION_SECOND_VERBAL = "Issue 2nd Verbal Warning + Coaching"
NEXT_ACTION_FIRST_VERBAL = "Issue Verbal Warning"

CategoryLike = Union[WarningCategory, str]
WarningTypeLike = Union[WarningType, str]


def compute_expiration(warning_type: WarningType, issue_date: date) -> Optional[date]:
    """Expiration date for a warning issued on ``issue_date``.

    Returns:
        ``issue_date + expiration_days``, or ``None`` for permanent types.
    """
    config = WARNING_CONFIGS[warning_type]
    if config.is_permanent:
        return None
    return issue_date + timedelta(days=config.expiration_days)


def is_active(entry: ActionLogEntry, as_of: Optional[date] = None) -> bool:
    """``True`` if ``entry`` is neither deactivated nor expired at ``as_of``.

    Args:
        entry: Action-log entry to test.
        as_of: Evaluation date; defaults to today (UTC).
    """
    if entry.is_active is False:
        return False
    if entry.expiration_date is None:
        return True
    return entry.expiration_date > (as_of or today())


def days_until_expiration(expiration_date: date, as_of: Optional[date] = None) -> int:
    """Signed days from ``as_of`` to ``expiration_date`` (negative once expired)."""
    return (expiration_date - (as_of or today())).days


def _category_label(category: CategoryLike) -> str:
    return category.value if isinstance(category, WarningCategory) else category.strip()


def active_warnings(
    agent_email: str,
    category: CategoryLike,
    entries: Iterable[ActionLogEntry],
    as_of: Optional[date] = None,
    warning_type: Optional[WarningType] = None,
) -> list[ActionLogEntry]:
    """Active warnings for one subject in one warning category.

    Args:
        agent_email: Subject email (agent or leader).
        category: Warning category; compared against the entry's
            ``warning_type`` column.
        entries: Action-log snapshot.
        as_of: Evaluation date; defaults to today (UTC).
        warning_type: Restrict to a single warning type.

    Returns:
        Matching entries, in snapshot order.
    """
    as_of = as_of or today()
    label = _category_label(category)
    result: list[ActionLogEntry] = []
    for entry in entries:
        if entry.agent_email != agent_email:
            continue
        kind = entry.warning_kind
        if kind is None:
            continue
        if warning_type is not None and kind != warning_type:
            continue
        if (entry.warning_type or "").strip() != label:
            continue
        if is_active(entry, as_of):
            result.append(entry)
    return result


def count_active(
    agent_email: str,
    category: CategoryLike,
    entries: Iterable[ActionLogEntry],
    as_of: Optional[date] = None,
    warning_type: Optional[WarningType] = None,
) -> int:
    return len(active_warnings(agent_email, category, entries, as_of, warning_type))


def validate_progression(
    agent_email: str,
    new_type: WarningTypeLike,
    category: CategoryLike,
    entries: Iterable[ActionLogEntry],
    as_of: Optional[date] = None,
) -> ProgressionCheck:
    """Check whether issuing ``new_type`` now would skip a warning level.

    Never raises: an unknown warning label is reported as an invalid
    progression.

    Args:
        agent_email: Agent the warning would be issued to.
        new_type: Proposed warning type (enum or label).
        category: Warning category of the proposed warning.
        entries: Action-log snapshot.
        as_of: Evaluation date; defaults to today (UTC).

    Returns:
        ``ProgressionCheck(is_valid=True)`` or ``ProgressionCheck(False, message)``.
    """
    kind = new_type if isinstance(new_type, WarningType) else WarningType.parse(new_type)
    if kind is None:
        return ProgressionCheck(is_valid=False, message=f"Unknown warning type '{new_type}'")

    new_order = WARNING_CONFIGS[kind].progression_order
    active = active_warnings(agent_email, category, entries, as_of)

    if not active:
        if new_order > 1:
            return ProgressionCheck(
                is_valid=False,
                message="First warning must be a Verbal Warning",
            )
        return ProgressionCheck(is_valid=True)

    highest = max(WARNING_CONFIGS[w.warning_kind].progression_order for w in active)
    if new_order > highest + 1:
        return ProgressionCheck(
            is_valid=False,
            message=f"Cannot skip warning levels. Current highest: Level {highest}",
        )
    return ProgressionCheck(is_valid=True)


def get_warning_status(
    agent_email: str,
    category: CategoryLike,
    entries: Iterable[ActionLogEntry],
    as_of: Optional[date] = None,
) -> WarningStatus:
    """Summarise an agent's active warnings in one category.

    ``next_recommended_action`` rules (evaluated in order — first match wins):
        1. written >= 2 → "Prepare for Termination"         (at risk)
        2. written >= 1 → "Consider Final Warning or PIP"   (at risk)
        3. verbal  >= 2 → "Issue Written Warning"
        4. verbal  >= 1 → "Issue 2nd Verbal Warning + Coaching"
        5. otherwise    → "Issue Verbal Warning"

    Args:
        agent_email: Agent to summarise.
        category: Warning category.
        entries: Action-log snapshot.
        as_of: Evaluation date; defaults to today (UTC).

    Returns:
        ``WarningStatus`` for the agent.
    """
    active = active_warnings(agent_email, category, list(entries), as_of)
    counts = {kind: 0 for kind in WarningType}
    for entry in active:
        counts[entry.warning_kind] += 1

    verbal = counts[WarningType.VERBAL]
    written = counts[WarningType.WRITTEN]
    final = counts[WarningType.FINAL]
    pip = counts[WarningType.PIP]

    highest = max(
        1 if verbal > 0 else 0,
        2 if written > 0 else 0,
        3 if final > 0 or pip > 0 else 0,
    )

    if written >= 2:
        next_action, at_risk = NEXT_ACTION_TERMINATION, True
    elif written >= 1:
        next_action, at_risk = NEXT_ACTION_FINAL_OR_PIP, True
    elif verbal >= 2:
        next_action, at_risk = NEXT_ACTION_WRITTEN, False
    elif verbal >= 1:
        next_action, at_risk = NEXT_ACTION_SECOND_VERBAL, False
    else:
        next_action, at_risk = NEXT_ACTION_FIRST_VERBAL, False

    return WarningStatus(
        verbal_warnings=verbal,
        written_warnings=written,
        final_warnings=final,
        pip_warnings=pip,
        total_active_warnings=verbal + written + final + pip,
        highest_warning_level=highest,
        next_recommended_action=next_action,
        is_at_risk=at_risk,
    )


def has_recent_coaching(
    agent_email: str,
    entries: Iterable[ActionLogEntry],
    as_of: Optional[date] = None,
    days_back: int = 30,
) -> bool:
    """``True`` if a coaching session for the agent was logged within ``days_back`` days.

    The window is ``[as_of - days_back, as_of]``; entries dated after
    ``as_of`` are ignored.
    """
    as_of = as_of or today()
    cutoff = as_of - timedelta(days=days_back)
    return any(
        entry.agent_email == agent_email
        and entry.action_category == ActionCategory.COACHING
        and cutoff <= entry.action_date <= as_of
        for entry in entries
    )
