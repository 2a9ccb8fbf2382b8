"""ChaseAI — local control and orchestration system for AI agents."""

from __future__ import annotations

from caskforge.models.descriptor import (
    BinaryLink,
    CpuArch,
    HostOS,
    PackageDescriptor,
    Platform,
)

VERSION = "0.1.0"

CHASEAI = PackageDescriptor(
    identifier="chaseai",
    description="Local control and orchestration system for AI agents",
    homepage_url="https://github.com/chaseai/chaseai",
    download_url=(
        f"https://github.com/chaseai/chaseai/releases/download/v{VERSION}/"
        f"chase-{VERSION}-macos.dmg"
    ),
    # TODO: replace with the release DMG's SHA-256 once v0.1.0 is published.
    content_hash="0" * 64,
    version=VERSION,
    supported_variants=frozenset({
        Platform(os=HostOS.MACOS, arch=CpuArch.ARM64),
        Platform(os=HostOS.MACOS, arch=CpuArch.X86_64),
    }),
    app_bundle="ChaseAI.app",
    volume_name="ChaseAI",
    binary=BinaryLink(source="Contents/MacOS/ChaseAI", target="chase"),
    caveats=[
        "ChaseAI has been installed!",
        "You can now run: chase --help",
    ],
    test_args=["--version"],
)
