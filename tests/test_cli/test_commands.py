"""
Tests for qperform.cli — typer commands end to end via CliRunner.

What we test
------------
  - validate-config: OK with a valid file, exit 1 with a missing one.
  - classify / attribute-week / weeks: pure commands, no config needed.
  - warning-status / check-progression against an action-log file.
  - at-risk / recommend / leadership against snapshot files, with --write
    producing report files in the configured output directory.
  - Bad inputs exit with code 1 and an [ERROR] line.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from qperform.cli import app

runner = CliRunner()

AGENT = "a@example.com"


def _perf_rows(agent: str, scores: list[float]) -> list[dict]:
    starts = ["2025-10-05", "2025-10-12", "2025-10-19"]
    ends = ["2025-10-11", "2025-10-18", "2025-10-25"]
    return [
        {
            "agent_email": agent,
            "client": "Acme",
            "kpi_qa": score,
            "kpi_avg_prod": 100.0,
            "start_date": starts[i],
            "end_date": ends[i],
            "month_num": 10,
            "year_num": 2025,
        }
        for i, score in enumerate(scores)
    ]


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    """Config + snapshot files in tmp_path; returns the config path."""
    for name in ("QPERFORM_LOG_LEVEL", "QPERFORM_DEBUG", "QPERFORM_AS_OF"):
        monkeypatch.delenv(name, raising=False)

    perf = _perf_rows(AGENT, [90.0, 90.0, 90.0]) + _perf_rows("b@example.com", [100.0])
    (tmp_path / "performance.json").write_text(json.dumps(perf), encoding="utf-8")
    actions = [
        {
            "agent_email": AGENT,
            "action_type": "Verbal Warning",
            "action_date": "2025-10-01",
            "warning_type": "Substandard Work - QA",
            "taken_by": "someone@example.com",
        },
    ]
    (tmp_path / "actions.json").write_text(json.dumps(actions), encoding="utf-8")
    (tmp_path / "leaders.json").write_text(
        json.dumps({AGENT: "lead@example.com"}), encoding="utf-8"
    )

    config = tmp_path / "config.toml"
    config.write_text(
        "[data]\n"
        f'performance_file = "{(tmp_path / "performance.json").as_posix()}"\n'
        f'actions_file = "{(tmp_path / "actions.json").as_posix()}"\n'
        f'leaders_file = "{(tmp_path / "leaders.json").as_posix()}"\n'
        f'output_dir = "{(tmp_path / "out").as_posix()}"\n'
        "[evaluation]\nas_of = 2025-10-31\n"
        '[logging]\nlevel = "WARNING"\n',
        encoding="utf-8",
    )
    return config


class TestConfigCommands:
    def test_validate_config_ok(self, workspace):
        result = runner.invoke(app, ["validate-config", "--config", str(workspace)])
        assert result.exit_code == 0
        assert "[OK] Config valid." in result.output
        assert "2025-10-31" in result.output

    def test_validate_config_missing(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "x.toml")])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output


class TestPureCommands:
    def test_classify(self):
        result = runner.invoke(app, ["classify", "97.5", "--metric", "qa"])
        assert result.exit_code == 0
        assert "97.5% (Low)" in result.output

    def test_classify_unknown_metric(self):
        result = runner.invoke(app, ["classify", "97.5", "--metric", "speed"])
        assert result.exit_code == 1

    def test_attribute_week(self):
        result = runner.invoke(app, ["attribute-week", "2025-09-28", "2025-10-04"])
        assert result.exit_code == 0
        assert "October 2025 (week 1)" in result.output

    def test_attribute_week_bad_date(self):
        result = runner.invoke(app, ["attribute-week", "2025-13-01", "2025-10-04"])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output

    def test_weeks(self):
        result = runner.invoke(app, ["weeks", "10", "2025"])
        assert result.exit_code == 0
        assert "October 2025: 5 week(s)" in result.output
        assert "09/28/25 - 10/04/25" in result.output

    def test_weeks_bad_month(self):
        assert runner.invoke(app, ["weeks", "13", "2025"]).exit_code == 1


class TestLedgerCommands:
    def test_warning_status(self, workspace):
        result = runner.invoke(app, ["warning-status", AGENT, "--config", str(workspace)])
        assert result.exit_code == 0
        assert "Verbal:        1" in result.output
        assert "Issue 2nd Verbal Warning + Coaching" in result.output

    def test_check_progression_ok(self, workspace):
        result = runner.invoke(
            app, ["check-progression", AGENT, "Written Warning", "--config", str(workspace)]
        )
        assert result.exit_code == 0
        assert "[OK]" in result.output

    def test_check_progression_skip_rejected(self, workspace):
        result = runner.invoke(
            app, ["check-progression", AGENT, "Final Warning", "--config", str(workspace)]
        )
        assert result.exit_code == 1
        assert "Cannot skip warning levels" in result.output


class TestBatchCommands:
    def test_at_risk_writes_report(self, workspace):
        result = runner.invoke(app, ["at-risk", "--write", "--config", str(workspace)])
        assert result.exit_code == 0
        assert "[HIGH]" in result.output
        out = workspace.parent / "out" / "at_risk_substandard-work-qa_2025-10-31.json"
        assert out.exists()

    def test_recommend_writes_reports(self, workspace):
        result = runner.invoke(app, ["recommend", "--write", "--config", str(workspace)])
        assert result.exit_code == 0
        assert "Issue 2nd Verbal Warning + Coaching Session" in result.output
        out = workspace.parent / "out"
        assert (out / "recommendations_substandard-work-qa_2025-10-31.csv").exists()
        assert (out / "recommendations_substandard-work-qa_2025-10-31.json").exists()

    def test_recommend_month_filter(self, workspace):
        result = runner.invoke(
            app, ["recommend", "--month", "September", "--config", str(workspace)]
        )
        assert result.exit_code == 0
        assert "0 agent(s)" in result.output

    def test_recommend_bad_as_of(self, workspace):
        result = runner.invoke(
            app, ["recommend", "--as-of", "yesterday", "--config", str(workspace)]
        )
        assert result.exit_code == 1

    def test_leadership_case_d(self, workspace):
        result = runner.invoke(app, ["leadership", "--config", str(workspace)])
        assert result.exit_code == 0
        assert "[D] lead@example.com" in result.output

    def test_missing_snapshot(self, workspace, tmp_path):
        result = runner.invoke(
            app,
            ["recommend", "--performance", str(tmp_path / "none.json"), "--config", str(workspace)],
        )
        assert result.exit_code == 1
        assert "[ERROR]" in result.output
