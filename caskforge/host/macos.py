"""macOS host adapter — disk images via ``hdiutil``, bundle copies via ``ditto``."""

from __future__ import annotations

import logging
from pathlib import Path

from caskforge.core.command import run_cmd
from caskforge.core.errors import CommandTimeoutError, MountError
from caskforge.host.base import PosixHost

logger = logging.getLogger(__name__)

HDIUTIL = "hdiutil"
DITTO = "ditto"


class MacOSHost(PosixHost):
    """Mounts ``.dmg`` artifacts read-only, hidden from Finder."""

    def copy_argv(self, src: Path, dst: Path) -> list[str]:
        # ditto keeps symlinks, resource forks and extended attributes.
        return [DITTO, str(src), str(dst)]

    def mount(self, archive: Path, mount_point: Path, *, timeout: float) -> None:
        argv = [
            HDIUTIL, "attach", str(archive),
            "-mountpoint", str(mount_point),
            "-nobrowse", "-readonly", "-noautoopen",
        ]
        try:
            result = run_cmd(argv, timeout=timeout)
        except CommandTimeoutError as exc:
            raise MountError(f"Mounting {archive.name} timed out: {exc}") from exc
        if not result.ok:
            raise MountError(
                f"hdiutil attach failed ({result.returncode}) for {archive.name}: "
                f"{result.stderr.strip() or 'no output'}"
            )

    def unmount(self, mount_point: Path, *, timeout: float) -> None:
        try:
            result = run_cmd([HDIUTIL, "detach", str(mount_point)], timeout=timeout)
            if not result.ok:
                logger.warning(
                    "hdiutil detach %s failed (%d); retrying with -force",
                    mount_point, result.returncode,
                )
                result = run_cmd(
                    [HDIUTIL, "detach", str(mount_point), "-force"], timeout=timeout
                )
        except CommandTimeoutError as exc:
            raise MountError(f"Unmounting {mount_point} timed out: {exc}") from exc
        if not result.ok:
            raise MountError(
                f"hdiutil detach failed ({result.returncode}) for {mount_point}: "
                f"{result.stderr.strip() or 'no output'}. "
                f"Detach it manually with: hdiutil detach -force {mount_point}"
            )
