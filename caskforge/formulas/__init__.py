"""Compiled-in package descriptors and descriptor file I/O.

Descriptors ship as Python constants (``resolve_descriptor``) or as JSON
files (``load_descriptor`` / ``dump_descriptor``) carrying the same fields.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from caskforge.core.errors import DescriptorError
from caskforge.formulas.chaseai import CHASEAI
from caskforge.models.descriptor import PackageDescriptor

DEFAULT_IDENTIFIER = "chaseai"

_REGISTRY: dict[str, PackageDescriptor] = {
    CHASEAI.identifier: CHASEAI,
}


def available() -> list[str]:
    """Identifiers of every compiled-in descriptor."""
    return sorted(_REGISTRY)


def resolve_descriptor(identifier: str = DEFAULT_IDENTIFIER) -> PackageDescriptor:
    """Return the compiled-in descriptor for *identifier*.  No side effects."""
    try:
        return _REGISTRY[identifier]
    except KeyError:
        raise DescriptorError(
            f"Unknown package {identifier!r}. Available: {', '.join(available())}"
        ) from None


def load_descriptor(path: Path) -> PackageDescriptor:
    """Read a descriptor from a JSON file."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DescriptorError(f"Cannot read descriptor {path}: {exc}") from exc
    try:
        return PackageDescriptor.model_validate_json(raw)
    except ValidationError as exc:
        raise DescriptorError(f"Invalid descriptor {path}:\n{exc}") from exc


def dump_descriptor(descriptor: PackageDescriptor) -> str:
    """Serialize a descriptor to JSON text accepted by ``load_descriptor``."""
    return descriptor.model_dump_json(indent=2)


__all__ = [
    "DEFAULT_IDENTIFIER",
    "available",
    "resolve_descriptor",
    "load_descriptor",
    "dump_descriptor",
]
