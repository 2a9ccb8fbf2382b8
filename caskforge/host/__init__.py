"""Host-system adapters."""

from caskforge.host.base import HostSystem, PosixHost
from caskforge.host.macos import MacOSHost

__all__ = ["HostSystem", "PosixHost", "MacOSHost", "default_host"]


def default_host() -> HostSystem:
    """Return the adapter for the running operating system."""
    return MacOSHost()
