"""
Recommendation output models.

``RecommendationResult`` is the single corrective action chosen for one
subject (an agent, or a leader for cases D and E) in one evaluation.

``AgentRecommendationWithContext`` couples an agent's result with the week
and action counts it was derived from, for batch listings.

Both are frozen: a recommendation describes a point-in-time snapshot and is
never edited after it is produced.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from qperform.taxonomy.action_taxonomy import CaseType, TargetType


class RecommendationResult(BaseModel):
    """One corrective-action recommendation.

    Attributes:
        case_type: Which case rule produced this result.
        action: Short imperative, e.g. ``"Issue Written Warning"``.
        is_critical: Needs attention this cycle.
        notes: Explanation shown next to the action.
        requires_leadership_action: A director / AVP must be involved.
        target_type: Whether the action is taken on the agent or on leadership.
        priority: 1 (most urgent) to 5 (least).
    """

    model_config = ConfigDict(frozen=True)

    case_type: CaseType
    action: str
    is_critical: bool
    notes: str
    requires_leadership_action: bool
    target_type: TargetType
    priority: int

    @field_validator("priority")
    @classmethod
    def validate_priority_range(cls, v: int) -> int:
        if not 1 <= v <= 5:
            raise ValueError(f"priority must be in [1, 5], got {v}.")
        return v

    @field_validator("action", "notes")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("action and notes must not be empty.")
        return v.strip()


class AgentRecommendationWithContext(BaseModel):
    """An agent's recommendation plus the counts it was based on."""

    model_config = ConfigDict(frozen=True)

    agent_email: str
    agent_name: str
    recommendation: RecommendationResult
    underperforming_weeks: int
    total_weeks: int
    actions_taken: int
