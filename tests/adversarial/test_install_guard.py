"""Adversarial tests for the production guard and clobber protection.

Production mode must refuse placeholder descriptors before any side
effect, and no run may overwrite a bundle or binary it did not place
without an explicit override.
"""

from __future__ import annotations

import pytest

from caskforge.config import InstallerConfig
from caskforge.core.errors import (
    InstallError,
    InstallErrorReason,
    IntegrityError,
    LinkError,
    LinkErrorReason,
)
from caskforge.core.installer import Installer
from caskforge.core.production_guard import (
    ProductionConfigError,
    enforce_production_constraints,
)
from caskforge.formulas import resolve_descriptor
from caskforge.models.install import BundlePolicy, InstallStep, StepState

from conftest import FakeHost, make_bundle


class TestProductionGuard:
    def test_placeholder_hash_rejected_in_production(self):
        config = InstallerConfig(environment="production")
        with pytest.raises(ProductionConfigError, match="placeholder"):
            enforce_production_constraints(config, resolve_descriptor())

    def test_debug_rejected_in_production(self, descriptor):
        config = InstallerConfig(environment="production", debug=True)
        with pytest.raises(ProductionConfigError, match="debug=True"):
            enforce_production_constraints(config, descriptor)

    def test_all_violations_reported_together(self):
        config = InstallerConfig(environment="production", debug=True)
        with pytest.raises(ProductionConfigError) as exc_info:
            enforce_production_constraints(config, resolve_descriptor())
        assert "debug=True" in str(exc_info.value)
        assert "placeholder" in str(exc_info.value)

    def test_real_hash_passes_in_production(self, descriptor):
        enforce_production_constraints(InstallerConfig(environment="production"), descriptor)

    def test_development_tolerates_placeholder_at_construction(self, config):
        installer = Installer(resolve_descriptor(), config=config, host=FakeHost())
        assert installer.descriptor.is_placeholder_hash

    def test_installer_refuses_before_touching_host(self, tmp_path):
        host = FakeHost()
        config = InstallerConfig(environment="production", state_dir=tmp_path / "state")
        with pytest.raises(ProductionConfigError):
            Installer(resolve_descriptor(), config=config, host=host)
        assert host.mount_calls == []

    def test_placeholder_still_fails_verification_in_development(self, config, artifact, volume_dir):
        host = FakeHost({artifact: volume_dir})
        installer = Installer(resolve_descriptor(), config=config, host=host)
        with pytest.raises(IntegrityError, match="placeholder"):
            installer.install(artifact)
        assert host.mount_calls == []


class TestClobberProtection:
    def test_foreign_bundle_survives_rerun(self, installer, artifact, config, host):
        make_bundle(config.applications_dir, script="#!/bin/sh\necho hand-installed\n")

        with pytest.raises(InstallError) as exc_info:
            installer.install(artifact)

        assert exc_info.value.reason == InstallErrorReason.ALREADY_EXISTS
        exe = config.applications_dir / "ChaseAI.app" / "Contents" / "MacOS" / "ChaseAI"
        assert "hand-installed" in exe.read_text()
        assert host.mounted == {}
        assert installer.report.state_of(InstallStep.UNMOUNT) == StepState.PASSED

    def test_replace_policy_is_explicit(self, descriptor, config, host, receipts, artifact):
        make_bundle(config.applications_dir, script="#!/bin/sh\necho hand-installed\n")
        replacing = Installer(
            descriptor,
            config=config.model_copy(update={"bundle_policy": BundlePolicy.REPLACE}),
            host=host,
            receipts=receipts,
        )

        report = replacing.install(artifact)

        assert report.succeeded
        assert "hand-installed" not in report.installed.executable_path.read_text()

    def test_foreign_binary_survives(self, installer, artifact, config):
        config.bin_dir.mkdir(parents=True)
        (config.bin_dir / "chase").write_text("#!/bin/sh\necho other tool\n")

        with pytest.raises(LinkError) as exc_info:
            installer.install(artifact)

        assert exc_info.value.reason == LinkErrorReason.ALIAS_CONFLICT
        assert (config.bin_dir / "chase").read_text() == "#!/bin/sh\necho other tool\n"
        # The bundle stays placed with an unlinked receipt for a later --force run.
        assert installer.report.installed is not None
        assert installer.receipts.load("chaseai").linked is False
