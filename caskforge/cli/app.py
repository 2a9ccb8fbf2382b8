"""Main Typer application — imports and registers all CLI commands.

Entry point: ``caskforge`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import typer

from caskforge.cli.commands.info import info_cmd
from caskforge.cli.commands.install import install_cmd
from caskforge.cli.commands.smoke_cmd import smoke_cmd
from caskforge.cli.commands.verify import verify_cmd
from caskforge.config import InstallerConfig
from caskforge.logging_setup import configure_logging

app = typer.Typer(
    name="caskforge",
    help="Caskforge: verify, mount and install macOS application casks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="info", help="Show a package descriptor.")(info_cmd)
app.command(name="verify", help="Verify a downloaded artifact's checksum.")(verify_cmd)
app.command(name="install", help="Install a package from a downloaded artifact.")(install_cmd)
app.command(name="test", help="Smoke-test an installed package.")(smoke_cmd)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log at DEBUG level, including command output."
    ),
) -> None:
    """Configure logging before any command runs."""
    configure_logging("DEBUG" if verbose else InstallerConfig().log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
