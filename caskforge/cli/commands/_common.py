"""Shared helpers for CLI commands — descriptor loading, config overrides, report rendering."""

from __future__ import annotations

from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from caskforge.config import InstallerConfig
from caskforge.core.errors import CaskforgeError
from caskforge.formulas import load_descriptor, resolve_descriptor
from caskforge.models.descriptor import PackageDescriptor
from caskforge.models.install import InstallReport, StepState

console = Console()

_STATE_LABELS: dict[StepState, str] = {
    StepState.PASSED: "[green]PASSED[/green]",
    StepState.FAILED: "[bold red]FAILED[/bold red]",
    StepState.RUNNING: "[yellow]RUNNING[/yellow]",
    StepState.NOT_STARTED: "[dim]NOT STARTED[/dim]",
    StepState.SKIPPED: "[dim]SKIPPED[/dim]",
}


def load_target(package: str, descriptor_file: Path | None) -> PackageDescriptor:
    """Resolve the descriptor named on the command line, or exit 1."""
    try:
        if descriptor_file is not None:
            return load_descriptor(descriptor_file)
        return resolve_descriptor(package)
    except CaskforgeError as exc:
        fail("Descriptor error", exc)


def build_config(**overrides: Any) -> InstallerConfig:
    """Build the env-driven config, letting explicit CLI options win."""
    return InstallerConfig(**{k: v for k, v in overrides.items() if v is not None})


def fail(title: str, exc: BaseException) -> NoReturn:
    console.print(f"[bold red]{title}:[/bold red] {exc}")
    raise typer.Exit(code=1)


def render_report(report: InstallReport) -> Table:
    table = Table(title=f"{report.identifier} {report.version}")
    table.add_column("Step", style="cyan")
    table.add_column("State", justify="center")
    table.add_column("Detail", overflow="fold")
    for rec in report.steps:
        table.add_row(rec.step.value, _STATE_LABELS[rec.state], rec.detail)
    return table
