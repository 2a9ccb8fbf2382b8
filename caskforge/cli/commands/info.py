"""``caskforge info [PACKAGE]`` — show a package descriptor."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from caskforge.cli.commands._common import console, load_target
from caskforge.formulas import DEFAULT_IDENTIFIER, dump_descriptor


def info_cmd(
    package: str = typer.Argument(
        DEFAULT_IDENTIFIER,
        help="Identifier of a compiled-in package.",
    ),
    descriptor_file: Path | None = typer.Option(
        None,
        "--descriptor",
        "-d",
        help="Read the descriptor from a JSON file instead.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the descriptor as JSON.",
    ),
) -> None:
    """Show the metadata and install layout of a package."""
    d = load_target(package, descriptor_file)

    if as_json:
        typer.echo(dump_descriptor(d))
        return

    table = Table(title=f"[bold]{d.identifier}[/bold] {d.version}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", overflow="fold")
    table.add_row("Description", d.description)
    table.add_row("Homepage", d.homepage_url)
    table.add_row("Download", d.download_url)
    sha = d.content_hash + (" [yellow](placeholder)[/yellow]" if d.is_placeholder_hash else "")
    table.add_row("SHA-256", sha)
    table.add_row(
        "Platforms",
        ", ".join(sorted(str(p) for p in d.supported_variants)),
    )
    table.add_row("App bundle", d.app_bundle)
    table.add_row("Binary", f"{d.binary.target} -> {d.app_bundle}/{d.binary.source}")
    console.print(table)
