"""Caskforge: package descriptors and a verified, resumable installer for macOS casks.

  - Immutable, validated package descriptors (Python constants or JSON)
  - SHA-256 artifact verification that fails closed on placeholder hashes
  - Scoped disk-image mounts, always released
  - Receipt-backed bundle placement, idempotent across reruns
  - Entry-point aliasing without clobbering unrelated binaries
  - Post-install smoke test reported separately from the install itself
"""

__version__ = "0.1.0"
__description__ = "Package descriptors and a verified, resumable installer for macOS casks"

from caskforge.core.installer import Installer
from caskforge.formulas import resolve_descriptor

__all__ = ["Installer", "resolve_descriptor", "__version__"]
