"""
Recommendation report writer: CSV and JSON output for agent recommendations
and at-risk listings.

All functions are pure I/O. They consume in-memory batch results from
``ranker`` / ``risk.assessor`` and write human-readable + machine-readable
files.

Output files
------------
  {output_dir}/
    recommendations_{category}_{as_of}.csv    -- one row per agent, priority order
    recommendations_{category}_{as_of}.json   -- same data, structured JSON
    at_risk_{category}_{as_of}.json           -- at-risk agents, severity order

``{category}`` is a filename-safe slug of the warning category label, e.g.
``substandard-work-qa``.
"""

from __future__ import annotations

import csv
import json
import logging
import re
from datetime import date
from pathlib import Path
from typing import Optional

from qperform.ledger.warning_ledger import CategoryLike
from qperform.models.recommendation import AgentRecommendationWithContext
from qperform.models.status import AtRiskAgent
from qperform.utils.time_utils import today

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v1"


def category_slug(category: CategoryLike) -> str:
    """``"Substandard Work - QA"`` → ``"substandard-work-qa"``."""
    slug = re.sub(r"[^a-z0-9]+", "-", str(category).lower()).strip("-")
    return slug or "all"


def write_recommendation_csv(
    recommendations: list[AgentRecommendationWithContext],
    output_dir: Path,
    category: CategoryLike,
    as_of: Optional[date] = None,
) -> Path:
    """Write batch recommendations to a CSV file.

    Columns: rank, agent_email, agent_name, case_type, action, priority,
             is_critical, requires_leadership_action, target_type,
             underperforming_weeks, total_weeks, actions_taken, notes.

    Args:
        recommendations: Output of ``generate_all_recommendations()``.
        output_dir:      Directory to write the file (created if missing).
        category:        Warning category (used in filename).
        as_of:           Evaluation date label. Defaults to today.

    Returns:
        Path to the written CSV file.
    """
    if as_of is None:
        as_of = today()

    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / f"recommendations_{category_slug(category)}_{as_of}.csv"

    fieldnames = [
        "rank", "agent_email", "agent_name", "case_type", "action", "priority",
        "is_critical", "requires_leadership_action", "target_type",
        "underperforming_weeks", "total_weeks", "actions_taken", "notes",
    ]

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for rank, item in enumerate(recommendations, start=1):
            rec = item.recommendation
            writer.writerow(
                {
                    "rank":                       rank,
                    "agent_email":                item.agent_email,
                    "agent_name":                 item.agent_name,
                    "case_type":                  rec.case_type.value,
                    "action":                     rec.action,
                    "priority":                   rec.priority,
                    "is_critical":                rec.is_critical,
                    "requires_leadership_action": rec.requires_leadership_action,
                    "target_type":                rec.target_type.value,
                    "underperforming_weeks":      item.underperforming_weeks,
                    "total_weeks":                item.total_weeks,
                    "actions_taken":              item.actions_taken,
                    "notes":                      rec.notes,
                }
            )

    logger.info("Recommendation CSV written: %s (%d rows)", csv_path, len(recommendations))
    return csv_path


def write_recommendation_json(
    recommendations: list[AgentRecommendationWithContext],
    output_dir: Path,
    category: CategoryLike,
    as_of: Optional[date] = None,
) -> Path:
    """Write batch recommendations to a structured JSON file.

    The payload carries a ``summary`` block (counts per case type and the
    number of critical items) ahead of the per-agent list.

    Args:
        recommendations: Output of ``generate_all_recommendations()``.
        output_dir:      Target directory.
        category:        Used in filename + metadata.
        as_of:           Evaluation date label. Defaults to today.

    Returns:
        Path to the written JSON file.
    """
    if as_of is None:
        as_of = today()

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"recommendations_{category_slug(category)}_{as_of}.json"

    by_case: dict[str, int] = {}
    for item in recommendations:
        key = item.recommendation.case_type.value
        by_case[key] = by_case.get(key, 0) + 1

    payload: dict = {
        "schema_version": SCHEMA_VERSION,
        "category":       str(category),
        "as_of":          as_of.isoformat(),
        "summary": {
            "agents":   len(recommendations),
            "critical": sum(1 for r in recommendations if r.recommendation.is_critical),
            "by_case":  dict(sorted(by_case.items())),
        },
        "recommendations": [
            {"rank": rank, **item.model_dump(mode="json")}
            for rank, item in enumerate(recommendations, start=1)
        ],
    }

    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Recommendation JSON written: %s", json_path)
    return json_path


def write_at_risk_json(
    agents: list[AtRiskAgent],
    output_dir: Path,
    category: CategoryLike,
    as_of: Optional[date] = None,
) -> Path:
    """Write at-risk agents (as ranked by ``rank_at_risk_agents``) to JSON.

    Args:
        agents:     Output of ``rank_at_risk_agents()``.
        output_dir: Target directory.
        category:   Used in filename + metadata.
        as_of:      Evaluation date label. Defaults to today.

    Returns:
        Path to the written JSON file.
    """
    if as_of is None:
        as_of = today()

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"at_risk_{category_slug(category)}_{as_of}.json"

    payload: dict = {
        "schema_version": SCHEMA_VERSION,
        "category":       str(category),
        "as_of":          as_of.isoformat(),
        "agents": [
            {
                "agent_email":   a.agent_email,
                "agent_name":    a.agent_name,
                "client":        a.client,
                "category":      a.category,
                "risk_level":    a.at_risk_status.risk_level.value,
                "reasons":       list(a.at_risk_status.reasons),
                "consecutive_underperforming_weeks":
                    a.at_risk_status.consecutive_underperforming_weeks,
                "total_underperforming_weeks":
                    a.at_risk_status.total_underperforming_weeks,
                "requires_immediate_action": a.at_risk_status.requires_immediate_action,
            }
            for a in agents
        ],
    }

    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("At-risk JSON written: %s (%d agents)", json_path, len(agents))
    return json_path
