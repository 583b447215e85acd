"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``QPERFORM_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

CLI commands receive an ``AppConfig`` instance and turn it into an
``EvaluationContext`` with ``AppConfig.build_context()``; engine functions
never read configuration or environment variables themselves.
"""

from __future__ import annotations

import os
import tomllib
from datetime import date
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from qperform.context import EvaluationContext
from qperform.utils.time_utils import today

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Default snapshot inputs and report output directory."""

    model_config = ConfigDict(frozen=True)

    performance_file: str = "data/performance.json"
    actions_file: str = "data/actions.json"
    leaders_file: str = "data/leaders.json"
    output_dir: str = "data/outputs"


class RiskConfig(BaseModel):
    """Week thresholds for the at-risk rules."""

    model_config = ConfigDict(frozen=True)

    consecutive_weeks_threshold: int = 3
    total_weeks_threshold: int = 3
    verbal_combo_weeks_threshold: int = 2

    @field_validator(
        "consecutive_weeks_threshold",
        "total_weeks_threshold",
        "verbal_combo_weeks_threshold",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"risk thresholds must be >= 1, got {v}.")
        return v


class RecommendationConfig(BaseModel):
    """Recommendation-engine windows."""

    model_config = ConfigDict(frozen=True)

    coaching_lookback_days: int = 30
    leadership_underperforming_weeks: int = 2

    @field_validator("coaching_lookback_days", "leadership_underperforming_weeks")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"recommendation windows must be >= 1, got {v}.")
        return v


class EvaluationConfig(BaseModel):
    """Evaluation date pin. ``as_of = None`` means today's UTC date."""

    model_config = ConfigDict(frozen=True)

    as_of: Optional[date] = None


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    It is constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    risk: RiskConfig = RiskConfig()
    recommendations: RecommendationConfig = RecommendationConfig()
    evaluation: EvaluationConfig = EvaluationConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False

    def build_context(self, as_of: Optional[date] = None) -> EvaluationContext:
        """Evaluation context from the configured thresholds.

        Args:
            as_of: Overrides ``evaluation.as_of``; both unset means today.
        """
        return EvaluationContext(
            as_of=as_of or self.evaluation.as_of or today(),
            coaching_lookback_days=self.recommendations.coaching_lookback_days,
            consecutive_weeks_threshold=self.risk.consecutive_weeks_threshold,
            total_weeks_threshold=self.risk.total_weeks_threshold,
            verbal_combo_weeks_threshold=self.risk.verbal_combo_weeks_threshold,
            leadership_underperforming_weeks=self.recommendations.leadership_underperforming_weeks,
        )


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply ``QPERFORM_*`` environment variable overrides.

    Supported overrides:
      QPERFORM_LOG_LEVEL  → raw["logging"]["level"]
      QPERFORM_DEBUG      → raw["debug"]
      QPERFORM_AS_OF      → raw["evaluation"]["as_of"]  (ISO date)
    """
    if log_level := os.environ.get("QPERFORM_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("QPERFORM_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    if as_of := os.environ.get("QPERFORM_AS_OF"):
        raw.setdefault("evaluation", {})["as_of"] = as_of

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        risk=RiskConfig(**raw.get("risk", {})),
        recommendations=RecommendationConfig(**raw.get("recommendations", {})),
        evaluation=EvaluationConfig(**raw.get("evaluation", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
