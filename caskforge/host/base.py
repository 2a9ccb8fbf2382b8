"""Host-system capability set the install procedure is polymorphic over.

Defines the ``HostSystem`` Protocol that host adapters must satisfy, and
``PosixHost``, the shared base that implements everything except the
disk-image facility with POSIX filesystem calls and a bounded ``cp``.

Adapters:
1. **MacOSHost** — ``hdiutil`` attach/detach (``caskforge.host.macos``).
2. **Custom hosts** — any object satisfying ``HostSystem``; tests use a
   directory-backed fake so no real disk image is ever mounted.
"""

from __future__ import annotations

import abc
import errno
import logging
import os
import platform as _platform
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from caskforge.core.command import CmdResult, run_cmd
from caskforge.core.errors import UnsupportedPlatformError
from caskforge.models.descriptor import CpuArch, HostOS, Platform

logger = logging.getLogger(__name__)

_OS_NAMES: dict[str, HostOS] = {"Darwin": HostOS.MACOS}
_ARCH_NAMES: dict[str, CpuArch] = {
    "arm64": CpuArch.ARM64,
    "aarch64": CpuArch.ARM64,
    "x86_64": CpuArch.X86_64,
    "amd64": CpuArch.X86_64,
}


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class HostSystem(Protocol):
    """Capabilities the installer needs from the operating system."""

    def platform(self) -> Platform:
        """Return the (OS, CPU architecture) pair of this host."""
        ...

    def mount(self, archive: Path, mount_point: Path, *, timeout: float) -> None:
        """Attach *archive* at *mount_point*.  Raises ``MountError``."""
        ...

    def unmount(self, mount_point: Path, *, timeout: float) -> None:
        """Detach the volume at *mount_point*.  Raises ``MountError``."""
        ...

    def is_mount_point(self, path: Path) -> bool:
        """Return ``True`` if a volume is currently mounted at *path*."""
        ...

    def copy(self, src: Path, dst: Path, *, timeout: float) -> None:
        """Recursively copy the directory *src* to the new path *dst* within *timeout* seconds."""
        ...

    def link(self, target: Path, alias: Path) -> None:
        """Create a symbolic link *alias* pointing at *target*."""
        ...

    def run(self, argv: Sequence[str], *, timeout: float) -> CmdResult:
        """Run a command and return its result without raising on exit status."""
        ...


# ---------------------------------------------------------------------------
# Shared POSIX implementation
# ---------------------------------------------------------------------------


class PosixHost(abc.ABC):
    """POSIX filesystem operations shared by every concrete host.

    Subclasses supply ``mount`` and ``unmount``.
    """

    def platform(self) -> Platform:
        system = _platform.system()
        machine = _platform.machine()
        try:
            return Platform(os=_OS_NAMES[system], arch=_ARCH_NAMES[machine.lower()])
        except KeyError:
            raise UnsupportedPlatformError(
                f"Unsupported host platform: {system}/{machine}"
            ) from None

    @abc.abstractmethod
    def mount(self, archive: Path, mount_point: Path, *, timeout: float) -> None:
        ...

    @abc.abstractmethod
    def unmount(self, mount_point: Path, *, timeout: float) -> None:
        ...

    def is_mount_point(self, path: Path) -> bool:
        return os.path.ismount(path)

    def copy_argv(self, src: Path, dst: Path) -> list[str]:
        # Bundles carry internal symlinks (frameworks); keep them as links.
        return ["cp", "-R", "-P", str(src), str(dst)]

    def copy(self, src: Path, dst: Path, *, timeout: float) -> None:
        """Copy out of the mounted volume in a child process so a stalled read is bounded.

        Raises ``CommandTimeoutError`` when *timeout* expires and ``OSError``
        (``PermissionError`` for access failures) when the copy utility fails.
        """
        logger.info("Copying %s -> %s", src, dst)
        result = run_cmd(self.copy_argv(src, dst), timeout=timeout)
        if result.ok:
            return
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        if "Permission denied" in detail or "Operation not permitted" in detail:
            raise PermissionError(errno.EACCES, detail, str(dst))
        raise OSError(errno.EIO, detail, str(dst))

    def link(self, target: Path, alias: Path) -> None:
        logger.info("Linking %s -> %s", alias, target)
        os.symlink(target, alias)

    def run(self, argv: Sequence[str], *, timeout: float) -> CmdResult:
        return run_cmd(argv, timeout=timeout)
