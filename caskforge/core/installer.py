"""Install procedure — the central coordinator for a cask install.

The Installer wires the descriptor, configuration, host adapter and
receipt store together and runs the steps strictly in order:

    resolve -> verify -> mount -> install_bundle -> unmount
        -> link -> notify -> smoke_test (on request)

Nothing touches the filesystem before the artifact is verified.  The
volume is released on every exit path.  A bundle placed by an interrupted
run is found through its receipt and reused on the next run.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from caskforge.config import InstallerConfig
from caskforge.core.bundle_installer import install_bundle
from caskforge.core.errors import MountError, TestError, UnsupportedPlatformError
from caskforge.core.linker import link_entry_point
from caskforge.core.mounter import mounted
from caskforge.core.notify import post_install_notify
from caskforge.core.production_guard import enforce_production_constraints
from caskforge.core.receipts import ReceiptStore
from caskforge.core.smoke import smoke_test
from caskforge.core.verifier import verify_artifact
from caskforge.formulas import resolve_descriptor
from caskforge.host import HostSystem, default_host
from caskforge.models.descriptor import PackageDescriptor
from caskforge.models.install import (
    InstallReport,
    InstallStep,
    MountHandle,
    StepState,
)

logger = logging.getLogger(__name__)


class Installer:
    """Installs one package descriptor onto a host.

    Parameters
    ----------
    descriptor:
        The package to install.  Defaults to the compiled-in ChaseAI descriptor.
    config:
        Filesystem layout, timeouts and overwrite policies.
    host:
        Host capability adapter.  Defaults to the running OS's adapter.
    receipts:
        Receipt store.  Defaults to ``config.receipts_dir``.
    sleep:
        Used for mount retry backoff.
    """

    def __init__(
        self,
        descriptor: PackageDescriptor | None = None,
        *,
        config: InstallerConfig | None = None,
        host: HostSystem | None = None,
        receipts: ReceiptStore | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.descriptor = descriptor or resolve_descriptor()
        self.config = config or InstallerConfig()

        # Production guard: fails hard before any side effect
        enforce_production_constraints(self.config, self.descriptor)

        self.host = host or default_host()
        self.receipts = receipts or ReceiptStore(self.config.receipts_dir)
        self._sleep = sleep
        self.report: InstallReport | None = None

    # ------------------------------------------------------------------
    # Procedure
    # ------------------------------------------------------------------

    def install(self, artifact_path: Path, *, run_smoke_test: bool = False) -> InstallReport:
        """Run the full install procedure for a downloaded artifact.

        Any ``CaskforgeError`` propagates after ``self.report`` marks the
        failing step.  A failed smoke test does not raise; it is recorded
        so the caller can report an installed-but-broken state.
        """
        d = self.descriptor
        cfg = self.config
        report = self.report = InstallReport(identifier=d.identifier, version=d.version)
        artifact_path = Path(artifact_path)
        logger.info("Installing %s %s from %s", d.identifier, d.version, artifact_path)

        with self._step(report, InstallStep.RESOLVE):
            self._check_platform()

        with self._step(report, InstallStep.VERIFY):
            verify_artifact(artifact_path, d.content_hash)

        handle: MountHandle | None = None
        report.mark(InstallStep.MOUNT, StepState.RUNNING)
        try:
            with mounted(
                artifact_path,
                self.host,
                mount_root=cfg.mount_root,
                name=d.mount_name,
                timeout=cfg.command_timeout_seconds,
                retries=cfg.mount_retries,
                backoff_seconds=cfg.mount_retry_backoff_seconds,
                max_candidates=cfg.max_mount_point_candidates,
                sleep=self._sleep,
            ) as handle:
                report.mark(InstallStep.MOUNT, StepState.PASSED, str(handle.mount_point))
                with self._step(report, InstallStep.INSTALL_BUNDLE):
                    installed = install_bundle(
                        handle,
                        d,
                        self.host,
                        applications_dir=cfg.applications_dir,
                        receipts=self.receipts,
                        policy=cfg.bundle_policy,
                        timeout=cfg.command_timeout_seconds,
                    )
                report.installed = installed
                report.mark(
                    InstallStep.INSTALL_BUNDLE,
                    StepState.PASSED,
                    f"{installed.bundle_path}{' (reused)' if installed.reused else ''}",
                )
        except MountError as exc:
            if handle is None:
                report.mark(InstallStep.MOUNT, StepState.FAILED, str(exc))
            else:
                report.mark(InstallStep.UNMOUNT, StepState.FAILED, str(exc))
            raise
        finally:
            if handle is not None and report.state_of(InstallStep.UNMOUNT) == StepState.NOT_STARTED:
                self._record_release(report, handle)

        with self._step(report, InstallStep.LINK):
            installed = link_entry_point(
                installed,
                cfg.bin_dir,
                d,
                self.host,
                receipts=self.receipts,
                force=cfg.force_link,
            )
        report.installed = installed
        report.mark(InstallStep.LINK, StepState.PASSED, str(installed.alias_path))

        with self._step(report, InstallStep.NOTIFY):
            report.messages = post_install_notify(d, installed)

        if run_smoke_test:
            report.mark(InstallStep.SMOKE_TEST, StepState.RUNNING)
            try:
                self.test()
            except TestError as exc:
                logger.error(
                    "%s is installed but its smoke test failed: %s", d.identifier, exc
                )
                report.mark(InstallStep.SMOKE_TEST, StepState.FAILED, str(exc))
            else:
                report.mark(InstallStep.SMOKE_TEST, StepState.PASSED)
        else:
            report.mark(InstallStep.SMOKE_TEST, StepState.SKIPPED)

        logger.info("Installed %s %s", d.identifier, d.version)
        return report

    def test(self) -> str:
        """Run the smoke test against the configured binary directory."""
        return smoke_test(
            self.config.bin_dir,
            self.descriptor,
            self.host,
            timeout=self.config.smoke_test_timeout_seconds,
        )

    def verify(self, artifact_path: Path) -> str:
        """Verify an artifact against the descriptor without installing it."""
        return verify_artifact(Path(artifact_path), self.descriptor.content_hash)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_platform(self) -> None:
        current = self.host.platform()
        if not self.descriptor.supports(current):
            supported = ", ".join(sorted(str(p) for p in self.descriptor.supported_variants))
            raise UnsupportedPlatformError(
                f"{self.descriptor.identifier} does not support {current} "
                f"(supported: {supported})"
            )

    def _record_release(self, report: InstallReport, handle: MountHandle) -> None:
        if self.host.is_mount_point(handle.mount_point):
            report.mark(
                InstallStep.UNMOUNT,
                StepState.FAILED,
                f"{handle.mount_point} is still mounted",
            )
        else:
            report.mark(InstallStep.UNMOUNT, StepState.PASSED, str(handle.mount_point))

    @staticmethod
    @contextmanager
    def _step(report: InstallReport, step: InstallStep) -> Iterator[None]:
        report.mark(step, StepState.RUNNING)
        try:
            yield
        except Exception as exc:
            report.mark(step, StepState.FAILED, str(exc))
            raise
        if report.state_of(step) == StepState.RUNNING:
            report.mark(step, StepState.PASSED)
