"""
Weekly performance record model.

``PerformanceRecord`` is one agent's QA and Production metrics for one
calendar week, as delivered by the reporting backend. The engine reads these
records but never mutates them, so the model is frozen.

Scores are percentages (``97.5`` means 97.5%). The ``flag_*`` fields carry
the backend's own grade for the week; see
``qperform.classification.thresholds.grade`` for how the two are reconciled.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from qperform.taxonomy.performance_taxonomy import MetricType


class PerformanceRecord(BaseModel):
    """One agent-week of KPI results.

    Attributes:
        agent_email: Agent identity; blank emails are skipped by aggregations.
        agent_name: Display name, or ``None`` when the backend has none.
        agent_id: Backend employee identifier, if supplied.
        position: Job title at the time of the week.
        office: Office / site label.
        client: Client account the work was done for.
        category: Line of business within the client.
        task: Task name within the category.
        kpi_qa: QA score in percent, or ``None`` if not audited.
        flag_qa: Backend grade for the QA score (e.g. ``"Low"``).
        kpi_avg_prod: Production score in percent, or ``None``.
        flag_prod: Backend grade for the production score.
        week_range: Display label, ``"MM/DD/YY - MM/DD/YY"``.
        start_date: First day (Sunday) of the week.
        end_date: Last day (Saturday) of the week.
        month_num: Month the week is attributed to (1-12).
        month_name: Month name, if supplied.
        year_num: Year the week is attributed to.
    """

    model_config = ConfigDict(frozen=True)

    agent_email: str = ""
    agent_name: Optional[str] = None
    agent_id: Optional[str] = None
    position: Optional[str] = None
    office: Optional[str] = None
    client: str = ""
    category: str = ""
    task: str = ""
    kpi_qa: Optional[float] = None
    flag_qa: Optional[str] = None
    kpi_avg_prod: Optional[float] = None
    flag_prod: Optional[str] = None
    week_range: str = ""
    start_date: date
    end_date: date
    month_num: int
    month_name: Optional[str] = None
    year_num: int

    @field_validator("agent_email", mode="before")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("month_num")
    @classmethod
    def validate_month(cls, v: int) -> int:
        if not 1 <= v <= 12:
            raise ValueError(f"month_num must be in [1, 12], got {v}.")
        return v

    @model_validator(mode="after")
    def validate_week_bounds(self) -> "PerformanceRecord":
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date ({self.end_date}) must be >= start_date ({self.start_date})."
            )
        return self

    @property
    def display_name(self) -> str:
        """``agent_name`` or, failing that, the local part of the email."""
        if self.agent_name:
            return self.agent_name
        return self.agent_email.split("@")[0]

    def score_for(self, metric: MetricType) -> Optional[float]:
        return self.kpi_qa if metric == MetricType.QA else self.kpi_avg_prod

    def flag_for(self, metric: MetricType) -> Optional[str]:
        return self.flag_qa if metric == MetricType.QA else self.flag_prod
