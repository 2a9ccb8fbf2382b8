"""Tests for host adapters — hdiutil invocation and POSIX capabilities."""

from __future__ import annotations

from pathlib import Path

import pytest

from caskforge.core.command import CmdResult
from caskforge.core.errors import CommandTimeoutError, MountError, UnsupportedPlatformError
from caskforge.host import HostSystem, MacOSHost, default_host
from caskforge.host import base as host_base
from caskforge.host import macos as host_macos
from caskforge.models.descriptor import CpuArch, HostOS

from conftest import FakeHost


class _ScriptedRunner:
    """Stands in for run_cmd, replaying canned results in order."""

    def __init__(self, *results: CmdResult | Exception) -> None:
        self._results = list(results)
        self.calls: list[list[str]] = []

    def __call__(self, argv, *, timeout):
        self.calls.append(list(argv))
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _result(code: int, stderr: str = "") -> CmdResult:
    return CmdResult(argv=[], returncode=code, stdout="", stderr=stderr)


class TestMacOSHostMount:
    def test_attach_arguments(self, monkeypatch):
        runner = _ScriptedRunner(_result(0))
        monkeypatch.setattr(host_macos, "run_cmd", runner)

        MacOSHost().mount(Path("/tmp/chase.dmg"), Path("/Volumes/ChaseAI"), timeout=60)

        assert runner.calls == [[
            "hdiutil", "attach", "/tmp/chase.dmg",
            "-mountpoint", "/Volumes/ChaseAI",
            "-nobrowse", "-readonly", "-noautoopen",
        ]]

    def test_attach_failure(self, monkeypatch):
        monkeypatch.setattr(host_macos, "run_cmd", _ScriptedRunner(_result(1, "image not recognized")))
        with pytest.raises(MountError, match="image not recognized"):
            MacOSHost().mount(Path("/tmp/chase.dmg"), Path("/Volumes/ChaseAI"), timeout=60)

    def test_attach_timeout(self, monkeypatch):
        monkeypatch.setattr(
            host_macos, "run_cmd", _ScriptedRunner(CommandTimeoutError("timed out after 60s"))
        )
        with pytest.raises(MountError, match="timed out"):
            MacOSHost().mount(Path("/tmp/chase.dmg"), Path("/Volumes/ChaseAI"), timeout=60)


class TestMacOSHostUnmount:
    def test_detach(self, monkeypatch):
        runner = _ScriptedRunner(_result(0))
        monkeypatch.setattr(host_macos, "run_cmd", runner)
        MacOSHost().unmount(Path("/Volumes/ChaseAI"), timeout=60)
        assert runner.calls == [["hdiutil", "detach", "/Volumes/ChaseAI"]]

    def test_busy_volume_forced(self, monkeypatch):
        runner = _ScriptedRunner(_result(16, "Resource busy"), _result(0))
        monkeypatch.setattr(host_macos, "run_cmd", runner)
        MacOSHost().unmount(Path("/Volumes/ChaseAI"), timeout=60)
        assert runner.calls[1] == ["hdiutil", "detach", "/Volumes/ChaseAI", "-force"]

    def test_forced_detach_failure(self, monkeypatch):
        runner = _ScriptedRunner(_result(16, "Resource busy"), _result(16, "Resource busy"))
        monkeypatch.setattr(host_macos, "run_cmd", runner)
        with pytest.raises(MountError, match="hdiutil detach -force /Volumes/ChaseAI"):
            MacOSHost().unmount(Path("/Volumes/ChaseAI"), timeout=60)


class TestBundleCopy:
    def test_posix_copy_arguments(self, monkeypatch):
        runner = _ScriptedRunner(_result(0))
        monkeypatch.setattr(host_base, "run_cmd", runner)

        FakeHost().copy(Path("/Volumes/ChaseAI/ChaseAI.app"), Path("/Applications/.stage"), timeout=30)

        assert runner.calls == [["cp", "-R", "-P", "/Volumes/ChaseAI/ChaseAI.app", "/Applications/.stage"]]

    def test_macos_uses_ditto(self, monkeypatch):
        runner = _ScriptedRunner(_result(0))
        monkeypatch.setattr(host_base, "run_cmd", runner)

        MacOSHost().copy(Path("/Volumes/ChaseAI/ChaseAI.app"), Path("/Applications/.stage"), timeout=30)

        assert runner.calls == [["ditto", "/Volumes/ChaseAI/ChaseAI.app", "/Applications/.stage"]]

    def test_copy_timeout_propagates(self, monkeypatch):
        monkeypatch.setattr(
            host_base, "run_cmd", _ScriptedRunner(CommandTimeoutError("timed out after 30s"))
        )
        with pytest.raises(CommandTimeoutError):
            MacOSHost().copy(Path("/Volumes/ChaseAI/ChaseAI.app"), Path("/Applications/.stage"), timeout=30)

    def test_copy_permission_failure(self, monkeypatch):
        monkeypatch.setattr(
            host_base, "run_cmd",
            _ScriptedRunner(_result(1, "ditto: /Applications/.stage: Permission denied")),
        )
        with pytest.raises(PermissionError):
            MacOSHost().copy(Path("/Volumes/ChaseAI/ChaseAI.app"), Path("/Applications/.stage"), timeout=30)

    def test_copy_read_failure(self, monkeypatch):
        monkeypatch.setattr(
            host_base, "run_cmd", _ScriptedRunner(_result(1, "Input/output error"))
        )
        with pytest.raises(OSError, match="Input/output error"):
            MacOSHost().copy(Path("/Volumes/ChaseAI/ChaseAI.app"), Path("/Applications/.stage"), timeout=30)


class TestPosixCapabilities:
    def test_platform_detection(self, monkeypatch):
        monkeypatch.setattr(host_base._platform, "system", lambda: "Darwin")
        monkeypatch.setattr(host_base._platform, "machine", lambda: "arm64")
        p = MacOSHost().platform()
        assert (p.os, p.arch) == (HostOS.MACOS, CpuArch.ARM64)

    def test_intel_detection(self, monkeypatch):
        monkeypatch.setattr(host_base._platform, "system", lambda: "Darwin")
        monkeypatch.setattr(host_base._platform, "machine", lambda: "x86_64")
        assert MacOSHost().platform().arch == CpuArch.X86_64

    def test_unsupported_os(self, monkeypatch):
        monkeypatch.setattr(host_base._platform, "system", lambda: "Windows")
        monkeypatch.setattr(host_base._platform, "machine", lambda: "AMD64")
        with pytest.raises(UnsupportedPlatformError, match="Windows/AMD64"):
            MacOSHost().platform()

    def test_copy_preserves_internal_symlinks(self, tmp_path):
        src = tmp_path / "Src.app"
        (src / "Contents" / "Frameworks" / "Lib.framework" / "Versions" / "A").mkdir(parents=True)
        (src / "Contents" / "Frameworks" / "Lib.framework" / "Current").symlink_to("Versions/A")

        FakeHost().copy(src, tmp_path / "Dst.app", timeout=30)

        copied = tmp_path / "Dst.app" / "Contents" / "Frameworks" / "Lib.framework" / "Current"
        assert copied.is_symlink()

    def test_link(self, tmp_path):
        target = tmp_path / "exe"
        target.write_text("x")
        FakeHost().link(target, tmp_path / "alias")
        assert (tmp_path / "alias").resolve() == target.resolve()

    def test_adapters_satisfy_protocol(self):
        assert isinstance(MacOSHost(), HostSystem)
        assert isinstance(FakeHost(), HostSystem)
        assert isinstance(default_host(), MacOSHost)
