"""Caskforge CLI — Typer-based command-line interface.

Provides the ``caskforge`` command with subcommands for inspecting
descriptors, verifying artifacts, installing packages and smoke-testing
an installation.

All output uses Rich for formatted terminal display.
"""
