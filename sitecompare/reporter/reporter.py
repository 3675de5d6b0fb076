"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from sitecompare.errors import ReportError
from sitecompare.models.config import SuiteConfig
from sitecompare.models.results import SuiteResult

from .html_report import generate_html_report, report_filename
from .json_report import generate_json_report

logger = logging.getLogger(__name__)


class Reporter:
    """Generates reports from suite results."""

    def __init__(self, config: SuiteConfig):
        self.config = config

    def generate_reports(
        self, suite_result: SuiteResult, output_dir: Path | None = None,
    ) -> dict[str, str]:
        """Generate all configured report formats. Returns label -> file path.

        HTML reports are per device and keyed ``html:<device>``.
        """
        out_dir = output_dir or Path(self.config.report_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        generated = {}
        logger.debug("Report output directory: %s", out_dir)

        if "html" in self.config.report_formats:
            for run in suite_result.visual_runs:
                path = out_dir / report_filename(run.device)
                logger.debug("Generating HTML report for %s...", run.device)
                generate_html_report(run, path)
                generated[f"html:{run.device}"] = str(path)

        if "json" in self.config.report_formats:
            path = out_dir / f"sitecompare_report_{suite_result.run_id}.json"
            logger.debug("Generating JSON report...")
            try:
                generate_json_report(suite_result, path)
            except Exception as e:
                raise ReportError(f"Failed to write JSON report {path}: {e}") from e
            generated["json"] = str(path)
            logger.info("JSON report: %s", path)

        return generated
