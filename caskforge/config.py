"""Installer configuration — env-driven filesystem layout and policies.

Centralized config using pydantic-settings. Reads from a .env file and
CASKFORGE_* environment variables. The applications and binary
directories are environment facts, so they live here and are injected
into the core rather than hardcoded.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from caskforge.models.install import BundlePolicy


class InstallerConfig(BaseSettings):
    """Installer configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export CASKFORGE_APPLICATIONS_DIR=~/Applications
        export CASKFORGE_BIN_DIR=/opt/homebrew/bin
        export CASKFORGE_LOG_LEVEL=DEBUG

    Or via .env file::

        CASKFORGE_ENVIRONMENT=production
        CASKFORGE_BUNDLE_POLICY=replace
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CASKFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Filesystem layout
    applications_dir: Path = Path("/Applications")
    bin_dir: Path = Path("/usr/local/bin")
    mount_root: Path = Path("/Volumes")
    state_dir: Path = Path("~/.caskforge").expanduser()

    # Bounded waits for external utilities
    command_timeout_seconds: float = 120.0
    smoke_test_timeout_seconds: float = 30.0

    # Mounting
    mount_retries: int = 1
    mount_retry_backoff_seconds: float = 2.0
    max_mount_point_candidates: int = 8

    # Overwrite policies
    bundle_policy: BundlePolicy = BundlePolicy.FAIL
    force_link: bool = False

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    @property
    def receipts_dir(self) -> Path:
        return self.state_dir / "receipts"
