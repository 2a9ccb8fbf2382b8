"""Installer error taxonomy.

Every failure surfaces to the user as a ``CaskforgeError`` subclass with an
actionable message.  Errors with several distinct causes carry a ``reason``
enum so callers can branch without parsing messages.
"""

from __future__ import annotations

from enum import Enum


class CaskforgeError(RuntimeError):
    """Base class for all installer failures."""


class DescriptorError(CaskforgeError):
    """Raised when a descriptor cannot be resolved or parsed."""


class UnsupportedPlatformError(CaskforgeError):
    """Raised when the host platform is not a supported variant."""


class IntegrityError(CaskforgeError):
    """Raised when an artifact fails checksum verification.  Never retried."""


class CommandTimeoutError(CaskforgeError):
    """Raised when an external command exceeds its bounded wait."""


class MountError(CaskforgeError):
    """Raised when a disk image cannot be mounted or released."""


class InstallErrorReason(str, Enum):
    BUNDLE_NOT_FOUND = "bundle_not_found"
    PERMISSION_DENIED = "permission_denied"
    ALREADY_EXISTS = "already_exists"
    COPY_FAILED = "copy_failed"


class InstallError(CaskforgeError):
    """Raised when the application bundle cannot be placed."""

    def __init__(self, reason: InstallErrorReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class LinkErrorReason(str, Enum):
    TARGET_MISSING = "target_missing"
    ALIAS_CONFLICT = "alias_conflict"
    PERMISSION_DENIED = "permission_denied"


class LinkError(CaskforgeError):
    """Raised when the entry-point alias cannot be created."""

    def __init__(self, reason: LinkErrorReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class TestErrorReason(str, Enum):
    __test__ = False  # not a pytest class

    NON_ZERO_EXIT = "non_zero_exit"
    MISSING_ENTRY_POINT = "missing_entry_point"
    TIMEOUT = "timeout"


class TestError(CaskforgeError):
    """Raised when the installed entry point fails its smoke test."""

    __test__ = False  # not a pytest class

    def __init__(self, reason: TestErrorReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
