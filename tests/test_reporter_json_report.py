"""Tests for JSON report generation."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from sitecompare.models.results import (
    BrokenImage,
    FormFlowResult,
    ImageCheckResult,
    SuiteResult,
    VisualRunResult,
)
from sitecompare.reporter.json_report import generate_json_report


def _suite(**kwargs) -> SuiteResult:
    return SuiteResult(
        run_id="run_abc",
        started_at="2025-01-01T00:00:00Z",
        completed_at="2025-01-01T00:05:00Z",
        staging_url="https://staging.example.com",
        prod_url="https://www.example.com",
        **kwargs,
    )


class TestGenerateJsonReport:
    """Tests for generate_json_report function."""

    def test_basic_report(self, tmp_path: Path):
        out = tmp_path / "report.json"

        generate_json_report(_suite(), out)

        with open(out) as f:
            data = json.load(f)
        assert data["run_id"] == "run_abc"
        assert data["staging_url"] == "https://staging.example.com"
        assert data["has_failures"] is False

    def test_visual_counts_and_statuses(self, tmp_path: Path, visual_run: VisualRunResult):
        out = tmp_path / "report.json"

        generate_json_report(_suite(visual_runs=[visual_run]), out)

        with open(out) as f:
            data = json.load(f)
        run = data["visual_runs"][0]
        assert run["counts"] == {"total": 4, "pass": 1, "fail": 2, "error": 1}
        assert [r["status"] for r in run["results"]] == ["pass", "fail", "fail", "error"]
        assert run["results"][2]["similarity_percentage"] == "Size mismatch"
        assert data["has_failures"] is True

    def test_site_checks_included(self, tmp_path: Path):
        suite = _suite(
            image_checks=[ImageCheckResult(
                page_url="https://staging.example.com/", image_count=2, checked=1,
                broken=[BrokenImage(index=2, url="https://x/a.png", reason="HTTP 404")],
            )],
            form_flows=[FormFlowResult(name="Apply", passed=True, final_url="https://x/thanks")],
        )
        out = tmp_path / "report.json"

        generate_json_report(suite, out)

        with open(out) as f:
            data = json.load(f)
        assert data["image_checks"][0]["broken"][0]["reason"] == "HTTP 404"
        assert data["form_flows"][0]["name"] == "Apply"

    def test_failed_write_keeps_previous_report(self, tmp_path: Path):
        out = tmp_path / "report.json"
        out.write_text('{"run_id": "previous"}')

        with patch("sitecompare.reporter.json_report.json.dump", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                generate_json_report(_suite(), out)

        assert json.loads(out.read_text()) == {"run_id": "previous"}
        assert list(tmp_path.iterdir()) == [out]
