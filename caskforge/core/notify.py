"""Post-install notification."""

from __future__ import annotations

import logging

from caskforge.models.descriptor import PackageDescriptor
from caskforge.models.install import InstalledArtifact

logger = logging.getLogger(__name__)


def post_install_notify(
    descriptor: PackageDescriptor,
    installed: InstalledArtifact,
) -> list[str]:
    """Log the descriptor's caveats and return them for display."""
    messages = list(descriptor.caveats) or [
        f"{descriptor.identifier} {descriptor.version} has been installed to "
        f"{installed.bundle_path}."
    ]
    for line in messages:
        logger.info(line)
    return messages
