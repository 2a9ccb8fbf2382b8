"""Runtime install models — mount handles, installed artifacts, receipts, reports."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class BundlePolicy(str, Enum):
    """What to do when a bundle of the same name is already installed.

    An existing bundle backed by a matching receipt is always reused;
    the policy only decides the case where it is not.
    """

    FAIL = "fail"
    REPLACE = "replace"


class MountHandle(BaseModel):
    """A mounted artifact volume.  Released exactly once by the mounter."""

    model_config = ConfigDict(frozen=True)

    archive_path: Path
    mount_point: Path
    attempts: int = 1


class InstalledArtifact(BaseModel):
    """The bundle copied into the applications directory, plus its alias.

    Never mutated in place: linking produces a new instance via
    ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    version: str
    bundle_path: Path
    executable_path: Path
    alias_path: Path | None = None
    reused: bool = False


class InstallReceipt(BaseModel):
    """Persisted record of a placed bundle, used to resume or no-op a rerun."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    version: str
    content_hash: str
    bundle_path: Path
    alias_path: Path | None = None
    linked: bool = False
    installed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def matches(self, identifier: str, version: str, content_hash: str) -> bool:
        """Whether this receipt describes the given artifact exactly."""
        return (
            self.identifier == identifier
            and self.version == version
            and self.content_hash.lower() == content_hash.lower()
        )


class InstallStep(str, Enum):
    """Ordered steps of the install procedure."""

    RESOLVE = "resolve"
    VERIFY = "verify"
    MOUNT = "mount"
    INSTALL_BUNDLE = "install_bundle"
    UNMOUNT = "unmount"
    LINK = "link"
    NOTIFY = "notify"
    SMOKE_TEST = "smoke_test"


class StepState(str, Enum):
    """State of a single install step."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class StepRecord(BaseModel):
    """Outcome of one step, as shown to the user."""

    step: InstallStep
    state: StepState = StepState.NOT_STARTED
    detail: str = ""


class InstallReport(BaseModel):
    """Full outcome of an install run.

    The copy/link outcome and the smoke-test outcome are reported
    separately: a passing install with a failing smoke test is an
    installed-but-broken state, not a success.
    """

    identifier: str
    version: str
    steps: list[StepRecord] = Field(
        default_factory=lambda: [StepRecord(step=s) for s in InstallStep]
    )
    installed: InstalledArtifact | None = None
    messages: list[str] = Field(default_factory=list)

    def record(self, step: InstallStep) -> StepRecord:
        """Return the mutable record for *step*."""
        for rec in self.steps:
            if rec.step == step:
                return rec
        raise KeyError(step)

    def mark(self, step: InstallStep, state: StepState, detail: str = "") -> None:
        rec = self.record(step)
        rec.state = state
        if detail:
            rec.detail = detail

    def state_of(self, step: InstallStep) -> StepState:
        return self.record(step).state

    @property
    def install_succeeded(self) -> bool:
        """Whether the bundle was placed and its alias linked."""
        return (
            self.installed is not None
            and self.state_of(InstallStep.LINK) == StepState.PASSED
        )

    @property
    def installed_but_broken(self) -> bool:
        """Installed and linked, but the smoke test failed."""
        return (
            self.install_succeeded
            and self.state_of(InstallStep.SMOKE_TEST) == StepState.FAILED
        )

    @property
    def succeeded(self) -> bool:
        return self.install_succeeded and not self.installed_but_broken
