"""``caskforge verify ARTIFACT`` — check a downloaded artifact's checksum only."""

from __future__ import annotations

from pathlib import Path

import typer

from caskforge.cli.commands._common import console, fail, load_target
from caskforge.core.errors import IntegrityError
from caskforge.core.verifier import verify_artifact
from caskforge.formulas import DEFAULT_IDENTIFIER


def verify_cmd(
    artifact: Path = typer.Argument(
        ...,
        help="Path to the downloaded artifact.",
    ),
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
) -> None:
    """Verify an artifact against the descriptor's SHA-256 without installing it."""
    d = load_target(package, descriptor_file)
    try:
        digest = verify_artifact(artifact, d.content_hash)
    except IntegrityError as exc:
        fail("Integrity check failed", exc)

    console.print(f"[bold green]OK[/bold green] {artifact.name} sha256={digest}")
