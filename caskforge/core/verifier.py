"""Artifact integrity verification.

The expected digest is checked for shape *before* the file is hashed: a
malformed or placeholder digest is a hard failure, never a skipped check.
"""

from __future__ import annotations

import hmac
import logging
from pathlib import Path

from caskforge.core.errors import IntegrityError
from caskforge.core.hasher import sha256_file
from caskforge.models.descriptor import (
    SHA256_HEX_LENGTH,
    is_placeholder_hash,
    is_well_formed_sha256,
)

logger = logging.getLogger(__name__)


def verify_artifact(local_path: Path, expected_hash: str) -> str:
    """Verify the file at *local_path* against a SHA-256 hex digest.

    The comparison is case-insensitive.  Returns the computed digest.

    Raises
    ------
    IntegrityError
        If *expected_hash* is malformed or an all-zero placeholder, if the
        file is missing or not a regular file, or if the digests differ.
    """
    if not is_well_formed_sha256(expected_hash):
        raise IntegrityError(
            f"Expected hash is malformed: need {SHA256_HEX_LENGTH} hex characters "
            f"(SHA-256), got {expected_hash!r}. Refusing to install an unverified artifact."
        )
    if is_placeholder_hash(expected_hash):
        raise IntegrityError(
            "Expected hash is an all-zero placeholder. Set the real SHA-256 of "
            "the release artifact in the descriptor before installing."
        )

    path = Path(local_path)
    if not path.is_file():
        raise IntegrityError(f"Artifact not found or not a regular file: {path}")

    actual = sha256_file(path)
    if not hmac.compare_digest(actual, expected_hash.lower()):
        logger.error("Checksum mismatch for %s: expected=%s actual=%s", path, expected_hash, actual)
        raise IntegrityError(
            f"Checksum mismatch for {path.name}:\n"
            f"  expected: {expected_hash.lower()}\n"
            f"  actual:   {actual}\n"
            "The download may be corrupted or tampered with; delete it and download again."
        )

    logger.info("Verified %s sha256=%s", path, actual)
    return actual
