"""Production configuration guard — enforces hard constraints in production.

The guard runs once when an ``Installer`` is constructed and fails hard
(raises ``ProductionConfigError``) if any constraint is violated.

Outside production a placeholder descriptor hash is tolerated at
construction time so the descriptor can still be inspected, but
``verify_artifact`` rejects it unconditionally.
"""

from __future__ import annotations

import logging

from caskforge.config import InstallerConfig
from caskforge.models.descriptor import PackageDescriptor

logger = logging.getLogger(__name__)


class ProductionConfigError(RuntimeError):
    """Raised when production configuration constraints are violated.

    The installer cannot safely run in production mode with the current
    configuration.  It must not be caught and ignored.
    """


def enforce_production_constraints(
    config: InstallerConfig,
    descriptor: PackageDescriptor,
) -> None:
    """Validate all production-critical constraints.

    Constraints enforced
    --------------------
    1. Debug mode must be disabled.
    2. The descriptor must carry a real content hash, not the all-zero
       placeholder.

    Raises
    ------
    ProductionConfigError
        If any production constraint is violated.
    """
    if not config.is_production:
        return

    violations: list[str] = []

    if config.debug:
        violations.append(
            "debug=True is not allowed in production. "
            "Set CASKFORGE_DEBUG=false."
        )

    if descriptor.is_placeholder_hash:
        violations.append(
            f"Descriptor '{descriptor.identifier}' {descriptor.version} carries a "
            "placeholder (all-zero) content hash. Publish the artifact's real "
            "SHA-256 before installing in production."
        )

    if violations:
        msg = (
            "Production configuration guard failed.\n"
            + "\n".join(f"  - {v}" for v in violations)
        )
        logger.critical(msg)
        raise ProductionConfigError(msg)

    logger.info("Production configuration guard passed.")
