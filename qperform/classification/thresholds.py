"""
Performance thresholds: maps a percentage score to one of five levels.

QA and Production have separate cut points. Boundary operators follow the
executable grading used by the reporting backend, which differs slightly
from the human-readable descriptions at a few edges:

QA
--
    Great    : score >= 100
    Good     : 99 <= score < 100
    Normal   : 98 <= score < 99
    Low      : 97 <  score < 98
    Critical : score <= 97

Production
----------
    Great    : score >  101
    Good     : 100 <= score <= 101
    Normal   : 99 <= score < 100
    Low      : 98 <  score < 99
    Critical : score <= 98

Underperforming ⇔ Low or Critical.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from qperform.models.performance import PerformanceRecord
from qperform.taxonomy.performance_taxonomy import (
    UNDERPERFORMING_LEVELS,
    MetricType,
    PerformanceLevel,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelConfig:
    """Display metadata for one performance level.

    Attributes:
        level:         The level described.
        color:         Hex color used by the dashboard.
        severity:      Badge severity: "success", "info", "warning" or "danger".
        min_threshold: Lower cut point in percent.
        max_threshold: Upper cut point in percent, ``None`` for the top band.
        description:   Human-readable band, e.g. ``"QA >= 99% < 100%"``.
    """

    level:         PerformanceLevel
    color:         str
    severity:      str
    min_threshold: float
    max_threshold: Optional[float]
    description:   str


QA_THRESHOLDS: dict[PerformanceLevel, LevelConfig] = {
    PerformanceLevel.GREAT: LevelConfig(
        PerformanceLevel.GREAT, "#22C55E", "success", 100.0, None, "QA >= 100%",
    ),
    PerformanceLevel.GOOD: LevelConfig(
        PerformanceLevel.GOOD, "#86EFAC", "success", 99.0, 100.0, "QA >= 99% < 100%",
    ),
    PerformanceLevel.NORMAL: LevelConfig(
        PerformanceLevel.NORMAL, "#FCD34D", "warning", 98.0, 99.0, "QA >= 98% < 99%",
    ),
    PerformanceLevel.LOW: LevelConfig(
        PerformanceLevel.LOW, "#FB923C", "warning", 97.0, 98.0, "QA > 97% < 98%",
    ),
    PerformanceLevel.CRITICAL: LevelConfig(
        PerformanceLevel.CRITICAL, "#EF4444", "danger", 0.0, 97.0, "QA <= 97%",
    ),
}

PRODUCTION_THRESHOLDS: dict[PerformanceLevel, LevelConfig] = {
    PerformanceLevel.GREAT: LevelConfig(
        PerformanceLevel.GREAT, "#22C55E", "success", 101.0, None, "Production > 101%",
    ),
    PerformanceLevel.GOOD: LevelConfig(
        PerformanceLevel.GOOD, "#86EFAC", "success", 100.0, 101.0,
        "Production >= 100% <= 101%",
    ),
    PerformanceLevel.NORMAL: LevelConfig(
        PerformanceLevel.NORMAL, "#FCD34D", "warning", 99.0, 100.0,
        "Production >= 99% < 100%",
    ),
    PerformanceLevel.LOW: LevelConfig(
        PerformanceLevel.LOW, "#FB923C", "warning", 98.0, 99.0, "Production > 98% < 99%",
    ),
    PerformanceLevel.CRITICAL: LevelConfig(
        PerformanceLevel.CRITICAL, "#EF4444", "danger", 0.0, 98.0, "Production <= 98%",
    ),
}


def thresholds_for(metric: MetricType) -> dict[PerformanceLevel, LevelConfig]:
    return QA_THRESHOLDS if metric == MetricType.QA else PRODUCTION_THRESHOLDS


def classify(score: float, metric: MetricType) -> PerformanceLevel:
    """Grade a percentage score.

    Rules (evaluated in order — first match wins), see module docstring for
    the full table.

    Args:
        score:  Score in percent; negative values grade as Critical.
        metric: Which threshold table to use.

    Returns:
        The ``PerformanceLevel`` whose band contains ``score``.
    """
    if metric == MetricType.QA:
        if score >= 100:
            return PerformanceLevel.GREAT
        if score >= 99:
            return PerformanceLevel.GOOD
        if score >= 98:
            return PerformanceLevel.NORMAL
        if score > 97:
            return PerformanceLevel.LOW
        return PerformanceLevel.CRITICAL

    if score > 101:
        return PerformanceLevel.GREAT
    if score >= 100:
        return PerformanceLevel.GOOD
    if score >= 99:
        return PerformanceLevel.NORMAL
    if score > 98:
        return PerformanceLevel.LOW
    return PerformanceLevel.CRITICAL


def is_underperforming_level(level: Optional[PerformanceLevel]) -> bool:
    return level in UNDERPERFORMING_LEVELS


def is_underperforming(score: float, metric: MetricType) -> bool:
    """``True`` if ``score`` grades as Low or Critical."""
    return is_underperforming_level(classify(score, metric))


def parse_level(text: Optional[str]) -> Optional[PerformanceLevel]:
    """Parse a level name case-insensitively (``"LOW"`` → ``Low``), or ``None``."""
    if not text:
        return None
    wanted = text.strip().lower()
    for level in PerformanceLevel:
        if level.value.lower() == wanted:
            return level
    return None


def grade(record: PerformanceRecord, metric: MetricType) -> Optional[PerformanceLevel]:
    """Level of one record on one metric.

    The backend's own flag wins when it names a valid level, because the
    backend may score on a different scale than the thresholds above.
    Otherwise the raw score is classified. Returns ``None`` when the record
    carries neither.
    """
    level = parse_level(record.flag_for(metric))
    if level is not None:
        return level

    score = record.score_for(metric)
    if score is None:
        logger.debug(
            "No %s flag or score for %s week %s",
            metric, record.agent_email, record.start_date,
        )
        return None
    return classify(score, metric)


def is_record_underperforming(record: PerformanceRecord, metric: MetricType) -> bool:
    return is_underperforming_level(grade(record, metric))


def level_config(score: float, metric: MetricType) -> LevelConfig:
    return thresholds_for(metric)[classify(score, metric)]


def performance_color(score: float, metric: MetricType) -> str:
    return level_config(score, metric).color


def performance_severity(score: float, metric: MetricType) -> str:
    return level_config(score, metric).severity


def format_score_with_level(score: float, metric: MetricType) -> str:
    """Format like ``"97.5% (Low)"``."""
    return f"{score:.1f}% ({classify(score, metric)})"
