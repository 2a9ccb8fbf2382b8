"""Places the application bundle from a mounted volume into the applications directory.

The bundle is copied into a hidden staging directory beside its final
location and renamed into place only once the copy is complete, so a
failed copy never leaves a partial bundle where the user would find it.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path

from caskforge.core.command import DEFAULT_TIMEOUT_SECONDS
from caskforge.core.errors import CommandTimeoutError, InstallError, InstallErrorReason
from caskforge.core.receipts import ReceiptStore
from caskforge.host.base import HostSystem
from caskforge.models.descriptor import PackageDescriptor
from caskforge.models.install import (
    BundlePolicy,
    InstalledArtifact,
    InstallReceipt,
    MountHandle,
)

logger = logging.getLogger(__name__)


def _remove_tree(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)


def _reason_for(exc: BaseException) -> InstallErrorReason:
    if isinstance(exc, PermissionError):
        return InstallErrorReason.PERMISSION_DENIED
    return InstallErrorReason.COPY_FAILED


def _discard(path: Path, what: str) -> None:
    """Remove a leftover tree; a failure is logged, never raised."""
    if not (path.exists() or path.is_symlink()):
        return
    logger.warning("Removing %s %s", what, path)
    try:
        _remove_tree(path)
    except OSError as exc:
        logger.warning("Could not remove %s %s: %s. Remove it manually.", what, path, exc)


def _restore(backup: Path, dest: Path) -> None:
    try:
        backup.rename(dest)
    except OSError as exc:
        logger.error(
            "Could not restore the previous bundle to %s: %s. It was left at %s.",
            dest, exc, backup,
        )
    else:
        logger.warning("Restored the previous bundle at %s", dest)


def _ensure_writable(applications_dir: Path) -> None:
    try:
        applications_dir.mkdir(parents=True, exist_ok=True)
    except PermissionError as exc:
        raise InstallError(
            InstallErrorReason.PERMISSION_DENIED,
            f"Cannot create applications directory {applications_dir}: {exc}",
        ) from exc
    if not os.access(applications_dir, os.W_OK):
        raise InstallError(
            InstallErrorReason.PERMISSION_DENIED,
            f"Applications directory {applications_dir} is not writable. "
            "Rerun with sufficient privileges or set CASKFORGE_APPLICATIONS_DIR.",
        )


def install_bundle(
    handle: MountHandle,
    descriptor: PackageDescriptor,
    host: HostSystem,
    *,
    applications_dir: Path,
    receipts: ReceiptStore,
    policy: BundlePolicy = BundlePolicy.FAIL,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> InstalledArtifact:
    """Copy the descriptor's bundle out of the mounted volume.

    An existing bundle at the destination is reused when the receipt shows
    it was placed from this exact artifact.  Otherwise *policy* decides:
    ``FAIL`` raises ``ALREADY_EXISTS``; ``REPLACE`` swaps it out, putting the
    old bundle back if the new one cannot be moved into place.  The copy
    out of the volume is bounded by *timeout* seconds.

    Raises
    ------
    InstallError
        ``BUNDLE_NOT_FOUND``, ``PERMISSION_DENIED``, ``ALREADY_EXISTS`` or
        ``COPY_FAILED``.
    """
    source = handle.mount_point / descriptor.app_bundle
    if not source.is_dir():
        raise InstallError(
            InstallErrorReason.BUNDLE_NOT_FOUND,
            f"{descriptor.app_bundle} was not found in the mounted volume "
            f"{handle.mount_point}. The disk image does not contain the expected bundle.",
        )

    applications_dir = Path(applications_dir)
    dest = applications_dir / descriptor.app_bundle
    installed = InstalledArtifact(
        identifier=descriptor.identifier,
        version=descriptor.version,
        bundle_path=dest,
        executable_path=dest / descriptor.binary.source,
    )

    dest_exists = dest.exists() or dest.is_symlink()
    if dest_exists:
        receipt = receipts.load(descriptor.identifier)
        if (
            receipt is not None
            and receipt.bundle_path == dest
            and receipt.matches(descriptor.identifier, descriptor.version, descriptor.content_hash)
        ):
            logger.info("%s is already installed from this artifact; reusing it", dest)
            return installed.model_copy(update={"reused": True})
        if policy == BundlePolicy.FAIL:
            raise InstallError(
                InstallErrorReason.ALREADY_EXISTS,
                f"{dest} already exists and was not installed from "
                f"{descriptor.identifier} {descriptor.version}. Remove it, or rerun "
                "with --replace to overwrite it.",
            )

    _ensure_writable(applications_dir)

    staging = applications_dir / f".{descriptor.app_bundle}.caskforge-{uuid.uuid4().hex[:8]}"
    try:
        host.copy(source, staging, timeout=timeout)
    except (OSError, CommandTimeoutError) as exc:
        _discard(staging, "partial copy")
        raise InstallError(
            _reason_for(exc), f"Copying {source} to {applications_dir} failed: {exc}"
        ) from exc

    backup: Path | None = None
    if dest_exists:
        backup = applications_dir / f".{descriptor.app_bundle}.caskforge-old-{uuid.uuid4().hex[:8]}"
        logger.warning("Replacing existing bundle %s", dest)
        try:
            dest.rename(backup)
        except OSError as exc:
            _discard(staging, "staged copy")
            raise InstallError(
                _reason_for(exc), f"Cannot move the existing {dest} aside: {exc}"
            ) from exc

    try:
        staging.rename(dest)
    except OSError as exc:
        if backup is not None:
            _restore(backup, dest)
        _discard(staging, "staged copy")
        raise InstallError(
            _reason_for(exc), f"Cannot move the new bundle into {dest}: {exc}"
        ) from exc

    receipts.save(
        InstallReceipt(
            identifier=descriptor.identifier,
            version=descriptor.version,
            content_hash=descriptor.content_hash,
            bundle_path=dest,
        )
    )
    if backup is not None:
        _discard(backup, "previous bundle")
    logger.info("Installed %s", dest)
    return installed
