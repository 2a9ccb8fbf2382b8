"""Package descriptor models — static, immutable install metadata.

A descriptor is the de facto file format of a cask: it names the package,
points at exactly one immutable artifact version, pins that artifact's
SHA-256 digest, and declares where the application bundle and its
entry point live inside the artifact.
"""

from __future__ import annotations

import re
from enum import Enum
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

SHA256_HEX_LENGTH = 64

_IDENTIFIER_RE = re.compile(r"^[a-z0-9][a-z0-9._-]*$")
_VERSION_RE = re.compile(r"^\d+\.\d+(\.\d+)?([-+][0-9A-Za-z.-]+)?$")
_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


class HostOS(str, Enum):
    """Operating systems an artifact can target."""

    MACOS = "macos"


class CpuArch(str, Enum):
    """CPU architectures an artifact can target."""

    ARM64 = "arm64"
    X86_64 = "x86_64"


class Platform(BaseModel):
    """One (OS, CPU architecture) pair an artifact is valid for."""

    model_config = ConfigDict(frozen=True)

    os: HostOS
    arch: CpuArch

    def __str__(self) -> str:
        return f"{self.os.value}/{self.arch.value}"


class BinaryLink(BaseModel):
    """An executable inside the bundle exposed on the search path.

    ``source`` is relative to the bundle root; ``target`` is the alias
    name created in the binary directory.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    target: str

    @field_validator("source")
    @classmethod
    def _relative_source(cls, v: str) -> str:
        if not v or v.startswith("/") or ".." in v.split("/"):
            raise ValueError(f"binary source must be a relative path inside the bundle: {v!r}")
        return v

    @field_validator("target")
    @classmethod
    def _plain_target(cls, v: str) -> str:
        if not v or "/" in v or v in (".", ".."):
            raise ValueError(f"binary target must be a plain file name: {v!r}")
        return v


def _check_url(value: str, field_name: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"{field_name} must be an absolute http(s) URI, got {value!r}")
    return value


def is_well_formed_sha256(value: str) -> bool:
    """Return whether *value* has the length and charset of a SHA-256 hex digest."""
    return len(value) == SHA256_HEX_LENGTH and bool(_HEX_RE.match(value))


def is_placeholder_hash(value: str) -> bool:
    """Return whether *value* is an all-zero placeholder digest."""
    return bool(value) and set(value) == {"0"}


class PackageDescriptor(BaseModel):
    """Static metadata record identifying a package and its artifact.

    Examples
    --------
    >>> d = PackageDescriptor(
    ...     identifier="demo",
    ...     description="Demo app",
    ...     homepage_url="https://example.com/demo",
    ...     download_url="https://example.com/releases/1.2.0/demo-1.2.0.dmg",
    ...     content_hash="ab" * 32,
    ...     version="1.2.0",
    ...     supported_variants=[{"os": "macos", "arch": "arm64"}],
    ...     app_bundle="Demo.app",
    ...     binary={"source": "Contents/MacOS/Demo", "target": "demo"},
    ... )
    >>> d.is_placeholder_hash
    False
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    description: str
    homepage_url: str
    download_url: str
    content_hash: str  # SHA-256, lowercase hex
    version: str
    supported_variants: frozenset[Platform]

    # Install layout
    app_bundle: str
    binary: BinaryLink
    volume_name: str = ""
    caveats: list[str] = Field(default_factory=list)
    test_args: list[str] = Field(default_factory=lambda: ["--version"])

    @field_validator("identifier")
    @classmethod
    def _valid_identifier(cls, v: str) -> str:
        if not _IDENTIFIER_RE.match(v):
            raise ValueError(f"identifier must be a lowercase token, got {v!r}")
        return v

    @field_validator("description")
    @classmethod
    def _non_empty_description(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description must not be empty")
        return v

    @field_validator("homepage_url")
    @classmethod
    def _valid_homepage(cls, v: str) -> str:
        return _check_url(v, "homepage_url")

    @field_validator("download_url")
    @classmethod
    def _valid_download(cls, v: str) -> str:
        return _check_url(v, "download_url")

    @field_validator("content_hash")
    @classmethod
    def _valid_hash(cls, v: str) -> str:
        if not is_well_formed_sha256(v):
            raise ValueError(
                f"content_hash must be {SHA256_HEX_LENGTH} hex characters "
                f"(SHA-256), got {len(v)} characters"
            )
        return v.lower()

    @field_validator("version")
    @classmethod
    def _valid_version(cls, v: str) -> str:
        if not _VERSION_RE.match(v):
            raise ValueError(f"version must look like MAJOR.MINOR[.PATCH], got {v!r}")
        return v

    @field_validator("supported_variants")
    @classmethod
    def _non_empty_variants(cls, v: frozenset[Platform]) -> frozenset[Platform]:
        if not v:
            raise ValueError("supported_variants must name at least one platform")
        return v

    @field_validator("app_bundle")
    @classmethod
    def _valid_bundle(cls, v: str) -> str:
        if not v.endswith(".app") or "/" in v:
            raise ValueError(f"app_bundle must be a bundle name ending in .app, got {v!r}")
        return v

    @model_validator(mode="after")
    def _version_in_url(self) -> PackageDescriptor:
        if self.version not in urlparse(self.download_url).path:
            raise ValueError(
                f"download_url does not reference version {self.version}: "
                f"{self.download_url}"
            )
        return self

    @field_serializer("supported_variants")
    def _serialize_variants(self, v: frozenset[Platform]) -> list[dict[str, str]]:
        return [
            {"os": p.os.value, "arch": p.arch.value}
            for p in sorted(v, key=lambda p: (p.os.value, p.arch.value))
        ]

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------

    @property
    def is_placeholder_hash(self) -> bool:
        """Whether the content hash is the all-zero placeholder."""
        return is_placeholder_hash(self.content_hash)

    @property
    def mount_name(self) -> str:
        """Preferred mount-point name for the artifact's volume."""
        return self.volume_name or self.app_bundle.removesuffix(".app")

    def supports(self, platform: Platform) -> bool:
        """Return whether the artifact is valid for *platform*."""
        return platform in self.supported_variants
