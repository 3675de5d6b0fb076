"""HTML report generator — one static visual comparison report per device."""

from __future__ import annotations

import html
import logging
import os
import time
from pathlib import Path

from sitecompare.errors import ReportError
from sitecompare.models.results import ComparisonResult, VisualRunResult
from sitecompare.url_utils import join_url

logger = logging.getLogger(__name__)

_STATUS_LABELS = {"pass": "Pass", "fail": "Fail", "error": "Error"}


def report_filename(device: str) -> str:
    return f"visual_comparison_report_{device}.html"


def _format_similarity(value) -> str:
    if isinstance(value, (int, float)):
        return f"{value:.2f}%"
    return html.escape(str(value))


def _build_row(run: VisualRunResult, r: ComparisonResult) -> str:
    """Build the table row for a single page."""
    status = run.status_of(r)
    staging = html.escape(join_url(run.staging_url, r.page_path))
    prod = html.escape(join_url(run.prod_url, r.page_path))

    if r.diff_path:
        href = html.escape(r.diff_path)
        thumb = f'<a href="{href}" target="_blank"><img src="{href}" alt="diff {html.escape(r.page_path)}"/></a>'
    else:
        thumb = "N/A"

    error_html = ""
    if r.error:
        error_html = f'<div class="row-error">{html.escape(r.error[:300])}</div>'

    return f'''
      <tr class="row-{status}">
        <td>
          <div class="page-path">{html.escape(r.page_path)}</div>
          <a href="{staging}" target="_blank">Staging</a> |
          <a href="{prod}" target="_blank">Prod</a>
        </td>
        <td>{_format_similarity(r.similarity_percentage)}</td>
        <td class="{status}">{_STATUS_LABELS[status]}{error_html}</td>
        <td>{thumb}</td>
      </tr>'''


def render_report(run: VisualRunResult, generated_at: str) -> str:
    """Render the report document for one device. Pure: touches no files."""
    counts = run.counts()
    device = html.escape(run.device)
    staging = html.escape(run.staging_url)
    prod = html.escape(run.prod_url)
    rows = "".join(_build_row(run, r) for r in run.results)

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Visual Comparison Report - {device}</title>
<style>
  body {{ font-family: Arial, sans-serif; line-height: 1.5; margin: 20px; }}
  h1, h2 {{ text-align: center; }}
  .summary {{ text-align: center; margin: 20px 0; }}
  table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
  th, td {{ border: 1px solid #ddd; padding: 8px; text-align: center; }}
  th {{ background-color: #f2f2f2; }}
  .pass {{ color: green; font-weight: bold; }}
  .fail {{ color: red; font-weight: bold; }}
  .error {{ color: orange; font-weight: bold; }}
  .page-path {{ font-family: monospace; }}
  .row-error {{ font-weight: normal; font-size: 0.85em; color: #9a3412; }}
  img {{ max-width: 150px; cursor: pointer; }}
</style>
</head>
<body>
  <h1>Visual Comparison Report</h1>
  <h2>Device: {device} ({run.viewport_width}x{run.viewport_height})</h2>
  <div class="summary">
    <p>Total Pages Tested: {counts["total"]}</p>
    <p class="pass">Passed: {counts["pass"]}</p>
    <p class="fail">Failed: {counts["fail"]}</p>
    <p class="error">Errors: {counts["error"]}</p>
    <p>Pass threshold: {run.pass_threshold:g}% similarity</p>
    <p>Last Run: {html.escape(generated_at)}</p>
    <p>Environments Tested:
      <a href="{staging}" target="_blank">Staging: {staging}</a>,
      <a href="{prod}" target="_blank">Prod: {prod}</a>
    </p>
  </div>
  <table>
    <thead>
      <tr>
        <th>Page</th>
        <th>Similarity</th>
        <th>Status</th>
        <th>Thumbnail</th>
      </tr>
    </thead>
    <tbody>{rows}
    </tbody>
  </table>
</body>
</html>'''


def _link_diffs(run: VisualRunResult, report_dir: Path) -> VisualRunResult:
    """Point diff links relative to the report, dropping files that are gone."""
    linked = []
    for r in run.results:
        diff_path = None
        if r.diff_path and Path(r.diff_path).exists():
            diff_path = Path(os.path.relpath(Path(r.diff_path).resolve(), report_dir)).as_posix()
        linked.append(r.model_copy(update={"diff_path": diff_path}))
    return run.model_copy(update={"results": linked})


def generate_html_report(run: VisualRunResult, output_path: Path) -> None:
    """Write the device report to ``output_path``.

    The file is written to a temporary sibling first and moved into place,
    so a failure never leaves a partial report behind.

    Raises:
        ReportError: If the report cannot be rendered or written.
    """
    output_path = Path(output_path)
    tmp_path = output_path.with_name(output_path.name + ".tmp")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        linked = _link_diffs(run, output_path.parent.resolve())
        report_html = render_report(linked, time.strftime("%Y-%m-%d %H:%M:%S"))
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(report_html)
        os.replace(tmp_path, output_path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise ReportError(f"Failed to write HTML report {output_path}: {e}") from e
    logger.info("HTML report generated: %s", output_path)
