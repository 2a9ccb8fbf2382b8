"""Post-install smoke test — the acceptance gate for an install."""

from __future__ import annotations

import logging
from pathlib import Path

from caskforge.core.errors import CommandTimeoutError, TestError, TestErrorReason
from caskforge.host.base import HostSystem
from caskforge.models.descriptor import PackageDescriptor

logger = logging.getLogger(__name__)


def smoke_test(
    bin_dir: Path,
    descriptor: PackageDescriptor,
    host: HostSystem,
    *,
    timeout: float = 30.0,
) -> str:
    """Run the installed alias with the descriptor's test arguments.

    Returns the command's stdout on a zero exit status.

    Raises
    ------
    TestError
        ``MISSING_ENTRY_POINT`` if the alias is absent or cannot be
        executed, ``TIMEOUT`` on expiry, ``NON_ZERO_EXIT`` otherwise.
    """
    alias = Path(bin_dir) / descriptor.binary.target
    if not (alias.is_symlink() or alias.exists()):
        raise TestError(
            TestErrorReason.MISSING_ENTRY_POINT,
            f"{alias} does not exist; the entry point was never linked.",
        )

    argv = [str(alias), *descriptor.test_args]
    try:
        result = host.run(argv, timeout=timeout)
    except CommandTimeoutError as exc:
        raise TestError(TestErrorReason.TIMEOUT, str(exc)) from exc
    except OSError as exc:
        raise TestError(
            TestErrorReason.MISSING_ENTRY_POINT,
            f"{alias} could not be executed: {exc}",
        ) from exc

    if not result.ok:
        raise TestError(
            TestErrorReason.NON_ZERO_EXIT,
            f"`{' '.join(argv)}` exited with status {result.returncode}: "
            f"{result.stderr.strip() or result.stdout.strip() or 'no output'}",
        )

    logger.info("Smoke test passed: %s", result.stdout.strip())
    return result.stdout
