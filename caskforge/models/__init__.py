"""Caskforge data models — all Pydantic v2."""

from caskforge.models.descriptor import (
    BinaryLink,
    CpuArch,
    HostOS,
    PackageDescriptor,
    Platform,
)
from caskforge.models.install import (
    BundlePolicy,
    InstalledArtifact,
    InstallReceipt,
    InstallReport,
    InstallStep,
    MountHandle,
    StepRecord,
    StepState,
)

__all__ = [
    # descriptor
    "HostOS",
    "CpuArch",
    "Platform",
    "BinaryLink",
    "PackageDescriptor",
    # install
    "BundlePolicy",
    "MountHandle",
    "InstalledArtifact",
    "InstallReceipt",
    "InstallStep",
    "StepState",
    "StepRecord",
    "InstallReport",
]
