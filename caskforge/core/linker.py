"""Exposes the bundle's entry point as an alias on the binary search path."""

from __future__ import annotations

import logging
from pathlib import Path

from caskforge.core.errors import LinkError, LinkErrorReason
from caskforge.core.receipts import ReceiptStore
from caskforge.host.base import HostSystem
from caskforge.models.descriptor import PackageDescriptor
from caskforge.models.install import InstalledArtifact

logger = logging.getLogger(__name__)


def _points_at(alias: Path, target: Path) -> bool:
    return alias.is_symlink() and alias.resolve() == target.resolve()


def link_entry_point(
    installed: InstalledArtifact,
    bin_dir: Path,
    descriptor: PackageDescriptor,
    host: HostSystem,
    *,
    receipts: ReceiptStore | None = None,
    force: bool = False,
) -> InstalledArtifact:
    """Create ``bin_dir/<alias>`` pointing at the bundle's executable.

    An alias that already points at this executable is left as is.  Any
    other entry of the same name is a conflict unless *force* is set, in
    which case it is replaced (a real directory is never replaced).

    Returns a copy of *installed* with ``alias_path`` set.
    """
    target = installed.executable_path
    if not target.is_file():
        raise LinkError(
            LinkErrorReason.TARGET_MISSING,
            f"Entry point {target} does not exist inside {installed.bundle_path}. "
            "The bundle layout does not match the descriptor.",
        )

    bin_dir = Path(bin_dir)
    alias = bin_dir / descriptor.binary.target

    try:
        if _points_at(alias, target):
            logger.info("%s already links to %s", alias, target)
        elif alias.is_symlink() or alias.exists():
            if not force or (alias.is_dir() and not alias.is_symlink()):
                raise LinkError(
                    LinkErrorReason.ALIAS_CONFLICT,
                    f"{alias} already exists and does not point at {target}. "
                    "Remove it, or rerun with --force to replace it.",
                )
            logger.warning("Replacing existing %s (was %s)", alias, _describe(alias))
            alias.unlink()
            host.link(target, alias)
        else:
            bin_dir.mkdir(parents=True, exist_ok=True)
            host.link(target, alias)
    except PermissionError as exc:
        raise LinkError(
            LinkErrorReason.PERMISSION_DENIED,
            f"Cannot create {alias}: {exc}. Rerun with sufficient privileges "
            "or set CASKFORGE_BIN_DIR.",
        ) from exc

    if receipts is not None:
        receipt = receipts.load(installed.identifier)
        if receipt is not None and receipt.bundle_path == installed.bundle_path:
            receipts.save(receipt.model_copy(update={"alias_path": alias, "linked": True}))

    return installed.model_copy(update={"alias_path": alias})


def _describe(path: Path) -> str:
    if path.is_symlink():
        return f"link to {path.readlink()}"
    return "regular file"
