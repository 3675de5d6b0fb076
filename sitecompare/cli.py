"""CLI entry point for the staging/prod comparison suite."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from sitecompare.errors import ReportError
from sitecompare.models.config import EnvironmentConfig, SuiteConfig
from sitecompare.models.results import SuiteResult
from sitecompare.orchestrator import Orchestrator

console = Console()

DEFAULT_CONFIG = "sitecompare.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(config: str) -> SuiteConfig:
    try:
        return SuiteConfig.load(config)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        console.print("Run 'sitecompare init' to create a default config.")
        sys.exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid config {config}:[/red]")
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"]) or "(root)"
            console.print(f"  {location}: {err['msg']}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Config file is not valid JSON:[/red] {config}")
        console.print(f"  {e}")
        sys.exit(1)


def _execute(cfg: SuiteConfig, **kwargs) -> SuiteResult:
    try:
        suite, reports = Orchestrator(cfg).run(**kwargs)
    except ReportError as e:
        console.print(f"[red]Report generation failed:[/red] {e}")
        sys.exit(2)
    print_summary(suite)
    for label, path in reports.items():
        console.print(f"  {label.upper()} report: [blue]{path}[/blue]")
    return suite


def print_summary(suite: SuiteResult) -> None:
    """Render the suite results as rich tables."""
    for run in suite.visual_runs:
        counts = run.counts()
        table = Table(title=f"Visual Comparison: {run.device}")
        table.add_column("Page", style="bold")
        table.add_column("Similarity")
        table.add_column("Status")
        for r in run.results:
            status = run.status_of(r)
            colour = {"pass": "green", "fail": "red", "error": "yellow"}[status]
            value = r.similarity_percentage
            shown = f"{value:.2f}%" if isinstance(value, (int, float)) else str(value)
            table.add_row(r.page_path, shown, f"[{colour}]{status.upper()}[/{colour}]")
        table.caption = (
            f"{counts['pass']} passed, {counts['fail']} failed, {counts['error']} errors"
        )
        console.print(table)

    if suite.image_checks:
        table = Table(title="Broken Images")
        table.add_column("Page", style="bold")
        table.add_column("Images")
        table.add_column("Skipped")
        table.add_column("Broken")
        for r in suite.image_checks:
            broken = f"[red]{len(r.broken)}[/red]" if r.broken else "[green]0[/green]"
            if r.error:
                broken = f"[red]error: {r.error[:60]}[/red]"
            table.add_row(r.page_url, str(r.image_count), str(r.skipped), broken)
        console.print(table)

    if suite.menu_checks:
        table = Table(title="Menus")
        table.add_column("Menu", style="bold")
        table.add_column("Links")
        table.add_column("Invalid")
        table.add_column("Result")
        for r in suite.menu_checks:
            outcome = "[green]PASS[/green]" if r.passed else f"[red]FAIL[/red] {r.error}"
            table.add_row(r.name, str(r.link_count), str(len(r.invalid_links)), outcome)
        console.print(table)

    if suite.form_flows:
        table = Table(title="Form Flows")
        table.add_column("Flow", style="bold")
        table.add_column("Duration")
        table.add_column("Result")
        for r in suite.form_flows:
            outcome = "[green]PASS[/green]" if r.passed else f"[red]FAIL[/red] {r.failure_reason}"
            table.add_row(r.name, f"{r.duration_seconds:.1f}s", outcome)
        console.print(table)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Staging vs production visual regression and site checks"""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def run(config: str) -> None:
    """Run everything: visual comparison, images, menus and forms."""
    cfg = _load_config(config)
    suite = _execute(cfg)
    if suite.has_failures:
        sys.exit(1)


@cli.command()
@click.option("--device", "-d", multiple=True, help="Device name (repeatable); default all")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def compare(device: tuple[str, ...], config: str) -> None:
    """Compare staging and prod screenshots and write the HTML report."""
    cfg = _load_config(config)
    try:
        devices = [cfg.device(name) for name in device] or None
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)
    _execute(cfg, stages=("visual",), devices=devices)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def images(config: str) -> None:
    """Check staging pages for broken images."""
    cfg = _load_config(config)
    _execute(cfg, stages=("images",))


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def menus(config: str) -> None:
    """Verify configured navigation menus."""
    cfg = _load_config(config)
    if not cfg.menus:
        console.print("[yellow]No menus configured[/yellow]")
        return
    _execute(cfg, stages=("menus",))


@cli.command()
@click.option("--name", "-n", multiple=True, help="Flow name (repeatable); default all")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def forms(name: tuple[str, ...], config: str) -> None:
    """Fill out and submit configured forms on staging."""
    cfg = _load_config(config)
    if not cfg.forms:
        console.print("[yellow]No form flows configured[/yellow]")
        return
    _execute(cfg, stages=("forms",), form_names=list(name) or None)


@cli.command()
@click.option("--staging", "-s", prompt="Staging base URL", help="Staging site base URL")
@click.option("--prod", "-p", prompt="Production base URL", help="Production site base URL")
def init(staging: str, prod: str) -> None:
    """Create a default configuration file."""
    config_path = Path(DEFAULT_CONFIG)
    if config_path.exists():
        if not click.confirm(f"{DEFAULT_CONFIG} already exists. Overwrite?"):
            return

    cfg = SuiteConfig(
        staging=EnvironmentConfig(base_url=staging),
        prod=EnvironmentConfig(base_url=prod),
    )
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nAdd page paths under \"pages\", then run:")
    console.print("  [blue]sitecompare run[/blue]")


if __name__ == "__main__":
    cli()
