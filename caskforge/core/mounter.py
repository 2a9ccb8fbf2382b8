"""Disk-image mounting with scoped acquisition and guaranteed release.

The mounted volume is an OS-wide resource.  ``mounted()`` holds it only for
the body of its ``with`` block and detaches it on every exit path, so a run
never leaks a mount point regardless of how extraction ends.

Mount-point selection is deterministic: ``<mount_root>/<name>``, then
``<name>-1``, ``<name>-2`` ... up to a bounded number of candidates.  A
candidate that is already a mount point, or an existing non-empty path, is
never mounted over.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from caskforge.core.errors import CommandTimeoutError, MountError
from caskforge.host.base import HostSystem
from caskforge.models.install import MountHandle

logger = logging.getLogger(__name__)

DEFAULT_MAX_CANDIDATES = 8


def _is_occupied(host: HostSystem, path: Path) -> bool:
    if host.is_mount_point(path):
        return True
    if path.is_symlink() or (path.exists() and not path.is_dir()):
        return True
    if path.is_dir():
        return any(path.iterdir())
    return False


def choose_mount_point(
    host: HostSystem,
    mount_root: Path,
    name: str,
    *,
    max_candidates: int = DEFAULT_MAX_CANDIDATES,
) -> Path:
    """Return the first free mount point derived from *name*.

    Raises ``MountError`` when every candidate is occupied.
    """
    for i in range(max_candidates):
        candidate = mount_root / (name if i == 0 else f"{name}-{i}")
        if not _is_occupied(host, candidate):
            return candidate
        logger.warning("Mount point %s is occupied; trying the next candidate", candidate)
    raise MountError(
        f"No free mount point for {name!r} under {mount_root} after "
        f"{max_candidates} candidates. Detach stale volumes (hdiutil info) and retry."
    )


def mount_archive(
    archive_path: Path,
    host: HostSystem,
    *,
    mount_root: Path,
    name: str,
    timeout: float,
    max_candidates: int = DEFAULT_MAX_CANDIDATES,
    attempt: int = 1,
) -> MountHandle:
    """Mount *archive_path* at a collision-free point and return its handle.

    The caller owns the handle and must release it; prefer ``mounted()``.
    """
    archive = Path(archive_path)
    if not archive.is_file():
        raise MountError(f"Disk image not found: {archive}")

    mount_point = choose_mount_point(
        host, Path(mount_root), name, max_candidates=max_candidates
    )
    try:
        host.mount(archive, mount_point, timeout=timeout)
    except CommandTimeoutError as exc:
        raise MountError(f"Mounting {archive.name} timed out: {exc}") from exc

    logger.info("Mounted %s at %s", archive.name, mount_point)
    return MountHandle(archive_path=archive, mount_point=mount_point, attempts=attempt)


def release_mount(handle: MountHandle, host: HostSystem, *, timeout: float) -> None:
    """Detach the volume behind *handle*.  Raises ``MountError`` on failure."""
    try:
        host.unmount(handle.mount_point, timeout=timeout)
    except CommandTimeoutError as exc:
        raise MountError(f"Unmounting {handle.mount_point} timed out: {exc}") from exc
    logger.info("Unmounted %s", handle.mount_point)


@contextmanager
def mounted(
    archive_path: Path,
    host: HostSystem,
    *,
    mount_root: Path,
    name: str,
    timeout: float,
    retries: int = 1,
    backoff_seconds: float = 2.0,
    max_candidates: int = DEFAULT_MAX_CANDIDATES,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[MountHandle]:
    """Mount an artifact for the duration of a ``with`` block.

    A failed mount is retried up to *retries* times with linear backoff.
    The volume is always detached on exit.  If the body raised, an unmount
    failure is logged and the body's error propagates; otherwise the
    unmount failure is raised as ``MountError``.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            handle = mount_archive(
                archive_path,
                host,
                mount_root=mount_root,
                name=name,
                timeout=timeout,
                max_candidates=max_candidates,
                attempt=attempt,
            )
            break
        except MountError as exc:
            if attempt > retries:
                raise
            delay = backoff_seconds * attempt
            logger.warning(
                "Mount attempt %d failed: %s; retrying in %.1fs", attempt, exc, delay
            )
            sleep(delay)

    try:
        yield handle
    except BaseException:
        try:
            release_mount(handle, host, timeout=timeout)
        except MountError as unmount_exc:
            logger.error(
                "Could not release %s after a failed install: %s",
                handle.mount_point,
                unmount_exc,
            )
        raise
    release_mount(handle, host, timeout=timeout)
