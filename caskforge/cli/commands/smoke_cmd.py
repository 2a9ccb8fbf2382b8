"""``caskforge test`` — run the installed entry point's smoke test."""

from __future__ import annotations

from pathlib import Path

import typer

from caskforge.cli.commands._common import build_config, console, fail, load_target
from caskforge.core.errors import TestError
from caskforge.core.installer import Installer
from caskforge.core.production_guard import ProductionConfigError
from caskforge.formulas import DEFAULT_IDENTIFIER


def smoke_cmd(
    package: str = typer.Option(
        DEFAULT_IDENTIFIER,
        "--package",
        "-p",
        help="Identifier of a compiled-in package.",
    ),
    descriptor_file: Path | None = typer.Option(
        None,
        "--descriptor",
        "-d",
        help="Read the descriptor from a JSON file instead.",
    ),
    bin_dir: Path | None = typer.Option(
        None,
        "--bin-dir",
        help="Directory holding the alias [default: CASKFORGE_BIN_DIR or /usr/local/bin].",
    ),
) -> None:
    """Invoke the installed alias with its test arguments and check for exit 0."""
    d = load_target(package, descriptor_file)
    try:
        installer = Installer(d, config=build_config(bin_dir=bin_dir))
    except ProductionConfigError as exc:
        fail("Refusing to test", exc)

    try:
        output = installer.test()
    except TestError as exc:
        fail("Smoke test failed", exc)

    console.print(f"[bold green]Smoke test passed[/bold green] {output.strip()}")
