"""
Action-log entry model — one recorded disciplinary or coaching event.

Entries are immutable once logged. Everything the engine needs beyond the
raw columns (which warning type, which category, whether the subject is a
leader) is *derived* at read time through properties; nothing is written
back.

Derived fields
--------------
``warning_kind``        ``WarningType`` parsed from ``action_type`` (exact label),
                        or ``None`` for coaching / free-form entries.
``warning_category``    ``WarningCategory`` parsed from the ``warning_type`` column,
                        or ``None`` for unrecognised labels.
``action_category``     WARNING / COACHING / OTHER.
``role``                Explicit ``subject_role`` if supplied, else LEADER when the
                        category is leadership-scoped, else AGENT.

Whether a warning is *active* depends on the evaluation date and lives in
``qperform.ledger.warning_ledger.is_active``.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from qperform.taxonomy.action_taxonomy import (
    ActionCategory,
    SubjectRole,
    WarningCategory,
    WarningType,
)


class ActionLogEntry(BaseModel):
    """A logged coaching session, warning, or other corrective action.

    Attributes:
        id: Backend PK; ``None`` for entries not yet persisted.
        agent_email: Subject of the action (an agent, or a leader for
            leadership-scoped entries).
        agent_name: Subject display name, if supplied.
        action_type: Free-form label, e.g. ``"Verbal Warning"``, ``"Coaching"``.
        description: Free-text note entered by the issuer.
        taken_by: Email of the person who logged the action.
        warning_type: Warning category label (the column name is historical),
            e.g. ``"Substandard Work - QA"``.
        action_date: Date the action was issued.
        week_start_date: First day of the week the action refers to.
        week_end_date: Last day of the week the action refers to.
        expiration_date: Fixed at issue time; ``None`` means permanent.
        is_active: Explicit deactivation flag; ``None`` is treated as ``True``.
        client: Client the subject works on.
        category: Line of business the subject works on.
        subject_role: Explicit AGENT / LEADER tag, if the backend provides one.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    agent_email: str
    agent_name: Optional[str] = None
    action_type: str
    description: str = ""
    taken_by: str = ""
    warning_type: Optional[str] = None
    action_date: date
    week_start_date: Optional[date] = None
    week_end_date: Optional[date] = None
    expiration_date: Optional[date] = None
    is_active: Optional[bool] = None
    client: str = ""
    category: str = ""
    subject_role: Optional[SubjectRole] = None

    @field_validator("agent_email", "taken_by")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip()

    @field_validator("action_type")
    @classmethod
    def validate_action_type(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("action_type must not be empty.")
        return v.strip()

    @model_validator(mode="after")
    def validate_week_bounds(self) -> "ActionLogEntry":
        if (
            self.week_start_date is not None
            and self.week_end_date is not None
            and self.week_end_date < self.week_start_date
        ):
            raise ValueError(
                f"week_end_date ({self.week_end_date}) must be >= "
                f"week_start_date ({self.week_start_date})."
            )
        return self

    @property
    def warning_kind(self) -> Optional[WarningType]:
        return WarningType.parse(self.action_type)

    @property
    def warning_category(self) -> Optional[WarningCategory]:
        return WarningCategory.parse(self.warning_type)

    @property
    def action_category(self) -> ActionCategory:
        return ActionCategory.from_action_type(self.action_type)

    @property
    def role(self) -> SubjectRole:
        if self.subject_role is not None:
            return self.subject_role
        category = self.warning_category
        if category is not None and category.is_leadership_scoped:
            return SubjectRole.LEADER
        return SubjectRole.AGENT

    @property
    def is_leadership_scoped(self) -> bool:
        """``True`` when this entry records an action against a leader."""
        return self.role == SubjectRole.LEADER
