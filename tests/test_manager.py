"""Tests for the install/uninstall pipelines."""

from pathlib import Path

import pytest
from filelock import FileLock

from xcbridgectl.config import Configuration, InstallationTarget
from xcbridgectl.errors import (
    BinaryNotFoundError,
    LifecycleLockError,
    ServiceStartError,
    UnsupportedPlatformError,
)
from xcbridgectl.service import platform
from xcbridgectl.service.base import LogPurgeMode, ServiceState, StopOutcome
from xcbridgectl.service.descriptor import ServiceDescriptor
from xcbridgectl.service.manager import LifecycleManager


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


class TestInstall:
    def test_install_end_to_end(
        self, manager, target, macos, service_started, source_binary
    ):
        result = manager.install(Configuration(), cwd=source_binary.parent)

        assert result.platform == macos
        assert result.source_binary == source_binary
        assert result.installed_binary == target.binary_path
        assert result.status.state is ServiceState.RUNNING
        assert result.descriptor.arguments == ["--port", "9090"]
        assert ServiceDescriptor.read(target.descriptor_path) == result.descriptor

    def test_explicit_binary_path(
        self, manager, target, macos, service_started, source_binary, tmp_path
    ):
        config = Configuration(binary_path=source_binary)
        result = manager.install(config, cwd=tmp_path)
        assert result.source_binary == source_binary

    def test_install_twice_is_idempotent(
        self, manager, target, macos, service_started, source_binary
    ):
        manager.install(Configuration(), cwd=source_binary.parent)
        manager.install(Configuration(port=8080), cwd=source_binary.parent)

        assert service_started.loaded is True
        assert service_started.commands().count("unload") == 1
        assert list(target.install_dir.iterdir()) == [target.binary_path]
        assert list(target.descriptor_path.parent.iterdir()) == [target.descriptor_path]
        assert ServiceDescriptor.read(target.descriptor_path).arguments == [
            "--port",
            "8080",
        ]

    def test_platform_failure_mutates_nothing(
        self, manager, home, monkeypatch, source_binary
    ):
        def unsupported():
            raise UnsupportedPlatformError("xcbridge only runs on macOS")

        monkeypatch.setattr(platform, "validate", unsupported)

        with pytest.raises(UnsupportedPlatformError):
            manager.install(Configuration(), cwd=source_binary.parent)

        assert list(home.iterdir()) == []

    def test_missing_binary_mutates_nothing(self, manager, home, macos, tmp_path):
        with pytest.raises(BinaryNotFoundError):
            manager.install(Configuration(), cwd=tmp_path)

        assert list(home.iterdir()) == []

    def test_start_failure_keeps_files(
        self, manager, target, macos, launchctl, processes, source_binary
    ):
        with pytest.raises(ServiceStartError) as exc_info:
            manager.install(Configuration(), cwd=source_binary.parent)

        assert str(target.stderr_log_path) in exc_info.value.hint
        assert target.binary_path.exists()
        assert target.descriptor_path.exists()


class TestUninstall:
    def test_nothing_installed(self, manager, home, launchctl, processes):
        before = _snapshot(home)

        result = manager.uninstall(LogPurgeMode.PROMPT, confirm=lambda p: True)

        assert result.stop_outcome is StopOutcome.ALREADY_ABSENT
        assert result.removal.nothing_removed
        assert result.purged_logs == []
        assert _snapshot(home) == before

    def test_install_then_uninstall(
        self, manager, target, macos, service_started, processes, source_binary
    ):
        manager.install(Configuration(), cwd=source_binary.parent)
        processes.exit_after = processes.lookups + 1

        result = manager.uninstall(LogPurgeMode.KEEP)

        assert result.stop_outcome is StopOutcome.STOPPED
        assert result.removal.binary_removed
        assert result.removal.descriptor_removed
        assert service_started.loaded is False
        assert not target.binary_path.exists()
        assert not target.descriptor_path.exists()

    def test_unsupported_platform_touches_nothing(
        self, manager, target, home, processes, monkeypatch
    ):
        monkeypatch.setattr("sys.platform", "linux")
        target.install_dir.mkdir(parents=True)
        target.binary_path.write_bytes(b"binary")
        before = _snapshot(home)

        with pytest.raises(UnsupportedPlatformError):
            manager.uninstall(LogPurgeMode.FORCE)

        assert _snapshot(home) == before
        assert processes.lookups == 0

    def test_force_removes_logs(self, manager, target, launchctl, processes):
        target.stdout_log_path.parent.mkdir(parents=True)
        target.stdout_log_path.write_text("log")
        target.stderr_log_path.write_text("log")

        result = manager.uninstall(LogPurgeMode.FORCE)

        assert result.purged_logs == [target.stdout_log_path, target.stderr_log_path]


class TestStatus:
    def test_not_registered(self, manager, launchctl, processes):
        assert manager.status().state is ServiceState.NOT_REGISTERED

    def test_running(self, manager, launchctl, processes):
        processes.pids = [4242]
        status = manager.status()
        assert status.state is ServiceState.RUNNING
        assert status.pid == 4242

    def test_stopped(self, manager, target, launchctl, processes):
        target.descriptor_path.parent.mkdir(parents=True)
        target.descriptor_path.write_bytes(b"")
        assert manager.status().state is ServiceState.STOPPED

    def test_registered_but_dead(self, manager, target, launchctl, processes):
        target.descriptor_path.parent.mkdir(parents=True)
        target.descriptor_path.write_bytes(b"")
        launchctl.loaded = True

        status = manager.status()

        assert status.state is ServiceState.FAILED
        assert str(target.stderr_log_path) in status.message


class TestLocking:
    def test_concurrent_invocation_is_rejected(
        self, target: InstallationTarget, tmp_path: Path, launchctl, processes
    ):
        lock_path = tmp_path / "held.lock"
        manager = LifecycleManager(target, lock_path=lock_path, lock_timeout=0.05)

        with FileLock(str(lock_path)):
            with pytest.raises(LifecycleLockError):
                manager.uninstall(LogPurgeMode.KEEP)

    def test_lock_released_after_operation(self, manager, launchctl, processes):
        manager.uninstall(LogPurgeMode.KEEP)
        manager.uninstall(LogPurgeMode.KEEP)
