"""``caskforge install ARTIFACT`` — verify, mount, place and link a package.

Exit codes: 0 installed (and smoke-tested when ``--test`` is given),
1 install failed, 3 installed but the smoke test failed.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.panel import Panel

from caskforge.cli.commands._common import (
    build_config,
    console,
    fail,
    load_target,
    render_report,
)
from caskforge.core.errors import CaskforgeError
from caskforge.core.installer import Installer
from caskforge.core.production_guard import ProductionConfigError
from caskforge.formulas import DEFAULT_IDENTIFIER
from caskforge.models.install import BundlePolicy

EXIT_INSTALLED_BUT_BROKEN = 3


def install_cmd(
    artifact: Path = typer.Argument(
        ...,
        help="Path to the downloaded artifact (disk image).",
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
    applications_dir: Path | None = typer.Option(
        None,
        "--applications-dir",
        help="Destination for the app bundle [default: CASKFORGE_APPLICATIONS_DIR or /Applications].",
    ),
    bin_dir: Path | None = typer.Option(
        None,
        "--bin-dir",
        help="Destination for the alias [default: CASKFORGE_BIN_DIR or /usr/local/bin].",
    ),
    replace: bool = typer.Option(
        False,
        "--replace",
        help="Replace an existing bundle that was not installed from this artifact.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Replace an existing alias that points somewhere else.",
    ),
    run_test: bool = typer.Option(
        False,
        "--test",
        help="Run the smoke test after installing.",
    ),
) -> None:
    """Install a package from a downloaded artifact.

    The artifact is verified before anything is written.  An existing
    installation from the same artifact is reused, so rerunning is safe.
    """
    d = load_target(package, descriptor_file)
    config = build_config(
        applications_dir=applications_dir,
        bin_dir=bin_dir,
        bundle_policy=BundlePolicy.REPLACE if replace else None,
        force_link=True if force else None,
    )

    try:
        installer = Installer(d, config=config)
    except ProductionConfigError as exc:
        fail("Refusing to install", exc)

    try:
        report = installer.install(artifact, run_smoke_test=run_test)
    except CaskforgeError as exc:
        if installer.report is not None:
            console.print(render_report(installer.report))
        fail("Install failed", exc)

    console.print(render_report(report))
    console.print()

    if report.installed_but_broken:
        console.print(
            Panel(
                "\n".join([
                    f"[bold yellow]{d.identifier} {d.version} is installed, "
                    "but its smoke test failed.[/bold yellow]",
                    "",
                    f"[bold]Bundle:[/bold] {report.installed.bundle_path}",
                    f"[bold]Alias:[/bold]  {report.installed.alias_path}",
                ]),
                title="[bold]Installed but broken[/bold]",
                border_style="yellow",
                padding=(1, 2),
            )
        )
        raise typer.Exit(code=EXIT_INSTALLED_BUT_BROKEN)

    console.print(
        Panel(
            "\n".join(report.messages),
            title=f"[bold]{d.identifier} {d.version}[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
