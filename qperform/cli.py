"""
QPerform compliance engine — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Run the engine against the loaded snapshots.
  5. Report result to stdout (and optionally write report files).

Install and run::

    pip install -e .
    qperform --help
    qperform validate-config
    qperform classify 97.5 --metric qa
    qperform attribute-week 2025-09-28 2025-10-04
    qperform weeks 10 2025
    qperform warning-status agent@example.com --category "Substandard Work - QA"
    qperform check-progression agent@example.com "Written Warning"
    qperform at-risk --month 10 --year 2025 --write
    qperform recommend --category "Substandard Work - Production" --write
    qperform leadership --leaders data/leaders.json
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="qperform",
    help="QPerform compliance engine — performance grading, warnings and recommendations.",
    add_completion=False,
)

_DEFAULT_CATEGORY = "Substandard Work - QA"


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from pydantic import ValidationError

    from qperform.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from qperform.utils.logging import configure_logging
    configure_logging(config.logging)


def _parse_date_or_exit(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        typer.echo(f"[ERROR] Invalid date for {option}: '{value}'. Expected YYYY-MM-DD.", err=True)
        raise typer.Exit(code=1)


def _context_or_exit(config, as_of: Optional[str]):
    """Evaluation context from config, with an optional --as-of override."""
    pinned = _parse_date_or_exit(as_of, "--as-of") if as_of else None
    return config.build_context(pinned)


def _parse_metric_or_exit(metric: str):
    from qperform.taxonomy.performance_taxonomy import MetricType

    for member in MetricType:
        if metric.strip().lower() in (member.value.lower(), member.name.lower()):
            return member
    valid = [m.value for m in MetricType]
    typer.echo(f"[ERROR] Unknown metric '{metric}'. Valid values: {valid}", err=True)
    raise typer.Exit(code=1)


def _load_records_or_exit(path: str, filters=None):
    from qperform.ingestion.snapshot import load_performance_records

    try:
        records = load_performance_records(Path(path))
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    if filters is not None and not filters.is_empty:
        records = filters.apply(records)
    return records


def _load_actions_or_exit(path: str):
    from qperform.ingestion.snapshot import load_action_log

    try:
        return load_action_log(Path(path))
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _filters_or_exit(month, year, client, category, task):
    from pydantic import ValidationError

    from qperform.context import PerformanceFilters

    try:
        return PerformanceFilters(
            month=month, year=year, client=client, category=category, task=task,
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid filter: {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)
    ctx = config.build_context()

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Performance file: {config.data.performance_file}")
    typer.echo(f"  Action log file:  {config.data.actions_file}")
    typer.echo(f"  Output dir:       {config.data.output_dir}")
    typer.echo(f"  Evaluation date:  {ctx.as_of}")
    typer.echo(f"  Coaching window:  {ctx.coaching_lookback_days} days")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("classify")
def classify_score(
    score: float = typer.Argument(..., help="KPI score in percent, e.g. 97.5."),
    metric: str = typer.Option("QA", "--metric", help="QA or Production."),
) -> None:
    """Grade a single KPI score and print its level and color."""
    from qperform.classification.thresholds import format_score_with_level, level_config

    kind = _parse_metric_or_exit(metric)
    cfg = level_config(score, kind)
    typer.echo(f"{kind.value}: {format_score_with_level(score, kind)}")
    typer.echo(f"  Band:     {cfg.description}")
    typer.echo(f"  Color:    {cfg.color}")
    typer.echo(f"  Severity: {cfg.severity}")


@app.command("attribute-week")
def attribute_week_cmd(
    week_start: str = typer.Argument(..., help="Week start (ISO date)."),
    week_end: str = typer.Argument(..., help="Week end (ISO date)."),
) -> None:
    """Print the reporting month a Sunday–Saturday week belongs to."""
    from qperform.utils.time_utils import (
        attribute_week,
        format_week_range,
        week_number_in_month,
    )

    start = _parse_date_or_exit(week_start, "WEEK_START")
    end = _parse_date_or_exit(week_end, "WEEK_END")
    if end < start:
        typer.echo("[ERROR] WEEK_END must not be before WEEK_START.", err=True)
        raise typer.Exit(code=1)

    ref = attribute_week(start, end)
    number = week_number_in_month(start, ref.month, ref.year)
    typer.echo(f"{format_week_range(start, end)} → {ref.name} {ref.year} (week {number})")


@app.command("weeks")
def list_weeks(
    month: int = typer.Argument(..., help="Month number (1-12)."),
    year: int = typer.Argument(..., help="Four-digit year."),
) -> None:
    """List the Sunday–Saturday weeks attributed to a month."""
    from qperform.utils.time_utils import month_name, weeks_for_month

    try:
        spans = weeks_for_month(month, year)
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"{month_name(month)} {year}: {len(spans)} week(s)")
    for i, span in enumerate(spans, start=1):
        typer.echo(f"  Week {i}: {span.label}")


@app.command("warning-status")
def warning_status(
    agent_email: str = typer.Argument(..., help="Agent email."),
    category: str = typer.Option(_DEFAULT_CATEGORY, "--category", help="Warning category."),
    actions_file: Optional[str] = typer.Option(None, "--actions", help="Action-log file."),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Evaluation date (ISO)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print an agent's active warnings and next step on the ladder."""
    from qperform.ledger.warning_ledger import get_warning_status

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    ctx = _context_or_exit(config, as_of)
    actions = _load_actions_or_exit(actions_file or config.data.actions_file)

    status = get_warning_status(agent_email, category, actions, ctx.as_of)
    typer.echo(f"{agent_email} | {category} | as of {ctx.as_of}")
    typer.echo(f"  Verbal:        {status.verbal_warnings}")
    typer.echo(f"  Written:       {status.written_warnings}")
    typer.echo(f"  Final:         {status.final_warnings}")
    typer.echo(f"  PIP:           {status.pip_warnings}")
    typer.echo(f"  Highest level: {status.highest_warning_level}")
    typer.echo(f"  Next action:   {status.next_recommended_action}")
    if status.is_at_risk:
        typer.echo("  [AT RISK] Active Written Warning on file.")


@app.command("check-progression")
def check_progression(
    agent_email: str = typer.Argument(..., help="Agent email."),
    new_type: str = typer.Argument(..., help='Proposed warning, e.g. "Written Warning".'),
    category: str = typer.Option(_DEFAULT_CATEGORY, "--category", help="Warning category."),
    actions_file: Optional[str] = typer.Option(None, "--actions", help="Action-log file."),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Evaluation date (ISO)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Check that issuing a warning would not skip a level.

    Exits with code 1 when the progression is invalid.
    """
    from qperform.ledger.warning_ledger import validate_progression

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    ctx = _context_or_exit(config, as_of)
    actions = _load_actions_or_exit(actions_file or config.data.actions_file)

    check = validate_progression(agent_email, new_type, category, actions, ctx.as_of)
    if not check.is_valid:
        typer.echo(f"[ERROR] {check.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"[OK] {new_type} may be issued to {agent_email}.")


@app.command("at-risk")
def at_risk(
    category: str = typer.Option(_DEFAULT_CATEGORY, "--category", help="Warning category."),
    performance_file: Optional[str] = typer.Option(None, "--performance", help="Performance file."),
    actions_file: Optional[str] = typer.Option(None, "--actions", help="Action-log file."),
    month: Optional[str] = typer.Option(None, "--month", help="Month number or name."),
    year: Optional[int] = typer.Option(None, "--year", help="Year filter."),
    client: Optional[str] = typer.Option(None, "--client", help="Client filter."),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Evaluation date (ISO)."),
    write: bool = typer.Option(False, "--write", help="Write the at-risk JSON report."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """List agents at risk of termination, most severe first."""
    from qperform.recommendations.reporter import write_at_risk_json
    from qperform.risk.assessor import rank_at_risk_agents

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    ctx = _context_or_exit(config, as_of)
    filters = _filters_or_exit(month, year, client, None, None)
    records = _load_records_or_exit(performance_file or config.data.performance_file, filters)
    actions = _load_actions_or_exit(actions_file or config.data.actions_file)

    flagged = rank_at_risk_agents(records, category, actions, ctx)
    typer.echo(f"{len(flagged)} at-risk agent(s) | {category} | as of {ctx.as_of}")
    for agent in flagged:
        status = agent.at_risk_status
        typer.echo(f"  [{status.risk_level.value.upper()}] {agent.agent_name} <{agent.agent_email}>")
        for reason in status.reasons:
            typer.echo(f"      - {reason}")

    if write:
        path = write_at_risk_json(flagged, Path(config.data.output_dir), category, ctx.as_of)
        typer.echo(f"[OK] Report written: {path}")


@app.command("recommend")
def recommend(
    category: str = typer.Option(_DEFAULT_CATEGORY, "--category", help="Warning category."),
    performance_file: Optional[str] = typer.Option(None, "--performance", help="Performance file."),
    actions_file: Optional[str] = typer.Option(None, "--actions", help="Action-log file."),
    month: Optional[str] = typer.Option(None, "--month", help="Month number or name."),
    year: Optional[int] = typer.Option(None, "--year", help="Year filter."),
    client: Optional[str] = typer.Option(None, "--client", help="Client filter."),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Evaluation date (ISO)."),
    write: bool = typer.Option(False, "--write", help="Write CSV + JSON reports."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Recommend one corrective action per agent, most urgent first."""
    from qperform.recommendations.ranker import generate_all_recommendations
    from qperform.recommendations.reporter import (
        write_recommendation_csv,
        write_recommendation_json,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    ctx = _context_or_exit(config, as_of)
    filters = _filters_or_exit(month, year, client, None, None)
    records = _load_records_or_exit(performance_file or config.data.performance_file, filters)
    actions = _load_actions_or_exit(actions_file or config.data.actions_file)

    results = generate_all_recommendations(records, actions, category, ctx)
    typer.echo(f"{len(results)} agent(s) | {category} | as of {ctx.as_of}")
    for item in results:
        rec = item.recommendation
        marker = "!" if rec.is_critical else " "
        typer.echo(
            f" {marker}P{rec.priority} [{rec.case_type.value}] {item.agent_name}: {rec.action} "
            f"({item.underperforming_weeks}/{item.total_weeks} weeks underperforming)"
        )

    if write:
        out_dir = Path(config.data.output_dir)
        csv_path = write_recommendation_csv(results, out_dir, category, ctx.as_of)
        json_path = write_recommendation_json(results, out_dir, category, ctx.as_of)
        typer.echo(f"[OK] Reports written: {csv_path}, {json_path}")


@app.command("leadership")
def leadership(
    category: str = typer.Option(_DEFAULT_CATEGORY, "--category", help="Warning category."),
    performance_file: Optional[str] = typer.Option(None, "--performance", help="Performance file."),
    actions_file: Optional[str] = typer.Option(None, "--actions", help="Action-log file."),
    leaders_file: Optional[str] = typer.Option(None, "--leaders", help="Agent → leader map file."),
    month: Optional[str] = typer.Option(None, "--month", help="Month number or name."),
    year: Optional[int] = typer.Option(None, "--year", help="Year filter."),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Evaluation date (ISO)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Check whether leaders acted on their underperforming agents (cases D/E)."""
    from qperform.ingestion.snapshot import load_leader_map
    from qperform.recommendations.ranker import generate_all_leadership_recommendations

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    ctx = _context_or_exit(config, as_of)
    filters = _filters_or_exit(month, year, None, None, None)
    records = _load_records_or_exit(performance_file or config.data.performance_file, filters)
    actions = _load_actions_or_exit(actions_file or config.data.actions_file)
    try:
        leaders = load_leader_map(Path(leaders_file or config.data.leaders_file))
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    results = generate_all_leadership_recommendations(records, actions, category, leaders, ctx)
    if not results:
        typer.echo("[OK] No leadership action required.")
        return

    typer.echo(f"{len(results)} leadership case(s) | {category} | as of {ctx.as_of}")
    for item in results:
        rec = item.recommendation
        typer.echo(f"  P{rec.priority} [{rec.case_type.value}] {item.leader_email}: {rec.action}")
        typer.echo(f"      {rec.notes}")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
