"""Shared test fixtures for Caskforge."""

from __future__ import annotations

import shutil
import stat
from pathlib import Path

import pytest

from caskforge.config import InstallerConfig
from caskforge.core.errors import MountError
from caskforge.core.hasher import sha256_file
from caskforge.core.installer import Installer
from caskforge.core.receipts import ReceiptStore
from caskforge.formulas.chaseai import CHASEAI
from caskforge.host.base import PosixHost
from caskforge.models.descriptor import CpuArch, HostOS, PackageDescriptor, Platform

ENTRY_POINT_SCRIPT = """#!/bin/sh
if [ "$1" = "--version" ]; then
    echo "ChaseAI 0.1.0"
    exit 0
fi
echo "usage: chase [--version]" >&2
exit 64
"""


class FakeHost(PosixHost):
    """Directory-backed host: "mounting" copies a prepared volume tree.

    ``images`` maps an archive path to the directory holding the volume
    contents.  ``mounted`` is the live mount table.
    """

    def __init__(
        self,
        images: dict[Path, Path] | None = None,
        *,
        platform: Platform = Platform(os=HostOS.MACOS, arch=CpuArch.ARM64),
    ) -> None:
        self.images = dict(images or {})
        self.mounted: dict[Path, Path] = {}
        self.mount_calls: list[tuple[Path, Path]] = []
        self.unmount_calls: list[Path] = []
        self.fail_mounts = 0
        self.fail_unmount = False
        self._platform = platform

    def platform(self) -> Platform:
        return self._platform

    def mount(self, archive: Path, mount_point: Path, *, timeout: float) -> None:
        self.mount_calls.append((archive, mount_point))
        if self.fail_mounts:
            self.fail_mounts -= 1
            raise MountError("hdiutil: attach failed - Resource temporarily unavailable")
        source = self.images.get(archive)
        if source is None:
            raise MountError(f"hdiutil: attach failed - image not recognized: {archive}")
        shutil.copytree(source, mount_point, symlinks=True, dirs_exist_ok=True)
        self.mounted[mount_point] = archive

    def unmount(self, mount_point: Path, *, timeout: float) -> None:
        self.unmount_calls.append(mount_point)
        if self.fail_unmount:
            raise MountError(f"hdiutil: couldn't unmount {mount_point} - Resource busy")
        self.mounted.pop(mount_point)
        shutil.rmtree(mount_point)

    def is_mount_point(self, path: Path) -> bool:
        return path in self.mounted


def make_bundle(root: Path, *, script: str = ENTRY_POINT_SCRIPT) -> Path:
    """Create ``root/ChaseAI.app`` with an executable entry point."""
    bundle = root / "ChaseAI.app"
    macos = bundle / "Contents" / "MacOS"
    macos.mkdir(parents=True)
    (bundle / "Contents" / "Info.plist").write_text(
        "<plist><dict><key>CFBundleShortVersionString</key>"
        "<string>0.1.0</string></dict></plist>\n"
    )
    exe = macos / "ChaseAI"
    exe.write_text(script)
    exe.chmod(exe.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return bundle


@pytest.fixture
def volume_dir(tmp_path: Path) -> Path:
    """Contents of the ChaseAI disk image."""
    root = tmp_path / "image-contents"
    root.mkdir()
    make_bundle(root)
    return root


@pytest.fixture
def artifact(tmp_path: Path) -> Path:
    """A downloaded "disk image" whose bytes the descriptor pins."""
    path = tmp_path / "downloads" / "chase-0.1.0-macos.dmg"
    path.parent.mkdir()
    path.write_bytes(b"koly" + bytes(range(256)) * 64)
    return path


@pytest.fixture
def descriptor(artifact: Path) -> PackageDescriptor:
    """The ChaseAI descriptor pinned to the test artifact's real digest."""
    return PackageDescriptor.model_validate(
        {**CHASEAI.model_dump(), "content_hash": sha256_file(artifact)}
    )


@pytest.fixture
def host(artifact: Path, volume_dir: Path) -> FakeHost:
    return FakeHost({artifact: volume_dir})


@pytest.fixture
def config(tmp_path: Path) -> InstallerConfig:
    """Config rooted entirely in the temp directory."""
    return InstallerConfig(
        environment="development",
        applications_dir=tmp_path / "Applications",
        bin_dir=tmp_path / "bin",
        mount_root=tmp_path / "Volumes",
        state_dir=tmp_path / "state",
        mount_retry_backoff_seconds=0.0,
        command_timeout_seconds=10.0,
        smoke_test_timeout_seconds=10.0,
    )


@pytest.fixture
def receipts(config: InstallerConfig) -> ReceiptStore:
    return ReceiptStore(config.receipts_dir)


@pytest.fixture
def installer(
    descriptor: PackageDescriptor,
    config: InstallerConfig,
    host: FakeHost,
    receipts: ReceiptStore,
) -> Installer:
    return Installer(
        descriptor,
        config=config,
        host=host,
        receipts=receipts,
        sleep=lambda _: None,
    )
