"""JSON report output."""

from __future__ import annotations

import json
import os
from pathlib import Path

from sitecompare.models.results import SuiteResult


def generate_json_report(suite_result: SuiteResult, output_path: Path) -> None:
    """Write a machine-readable JSON report.

    Written to a temporary sibling and moved into place; on failure the
    temporary file is removed and any previous report is left untouched.
    """
    report = suite_result.model_dump()
    for run_data, run in zip(report["visual_runs"], suite_result.visual_runs):
        run_data["counts"] = run.counts()
        for row, r in zip(run_data["results"], run.results):
            row["status"] = run.status_of(r)
    report["has_failures"] = suite_result.has_failures

    output_path = Path(output_path)
    tmp_path = output_path.with_name(output_path.name + ".tmp")
    try:
        with open(tmp_path, "w") as f:
            json.dump(report, f, indent=2, default=str)
        os.replace(tmp_path, output_path)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink()
        raise
