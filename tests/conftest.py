"""Shared test fixtures and fakes."""

import logging
from pathlib import Path

import pytest

from xcbridgectl.config.paths import InstallationTarget
from xcbridgectl.service.launchd import ServiceController
from xcbridgectl.service.manager import LifecycleManager
from xcbridgectl.service.platform import PlatformInfo
from xcbridgectl.service.uninstaller import Uninstaller

# =============================================================================
# Fakes
# =============================================================================


class FakeLaunchctl:
    """Stands in for `launchctl`, tracking whether the agent is loaded.

    Attributes:
        calls: Every argument tuple launchctl was invoked with.
        loaded: Whether the label is currently registered.
        fail_load / fail_unload: Force the corresponding command to fail.
        on_load: Optional hook run after a successful load.
    """

    def __init__(self):
        self.calls: list[tuple[str, ...]] = []
        self.loaded = False
        self.load_count = 0
        self.fail_load = False
        self.fail_unload = False
        self.on_load = None
        self.pid = 4242

    def __call__(self, *args: str) -> tuple[int, str, str]:
        self.calls.append(args)
        command = args[0]

        if command == "list":
            if not self.loaded:
                return 113, "", 'Could not find service "ai.aptove.xcbridge"'
            return 0, f'{{\n\t"PID" = {self.pid};\n\t"LastExitStatus" = 0;\n}}\n', ""

        if command in ("unload", "remove"):
            if self.fail_unload:
                return 1, "", "Unload failed: 5: Input/output error"
            if not self.loaded:
                return 0, "", "Could not find specified service"
            self.loaded = False
            return 0, "", ""

        if command == "load":
            if self.fail_load:
                return 0, "", "Load failed: 5: Input/output error"
            self.loaded = True
            self.load_count += 1
            if self.on_load:
                self.on_load()
            return 0, "", ""

        return 1, "", f"unknown command {command}"

    def commands(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeProcess:
    def __init__(self, pid: int, table: "FakeProcessTable"):
        self.pid = pid
        self._table = table

    def kill(self) -> None:
        self._table.killed.append(self.pid)
        if self.pid in self._table.pids:
            self._table.pids.remove(self.pid)


class FakeProcessTable:
    """Stands in for psutil process lookup by name.

    Attributes:
        pids: Pids of running processes named like the service.
        exit_after: If set, processes disappear once this many lookups
            have been made.
        killed: Pids that received a forced kill.
    """

    def __init__(self):
        self.pids: list[int] = []
        self.lookups = 0
        self.exit_after: int | None = None
        self.killed: list[int] = []
        self.lookups_at_kill: int | None = None

    def find_processes(self, name: str) -> list[FakeProcess]:
        self.lookups += 1
        if self.exit_after is not None and self.lookups > self.exit_after:
            self.pids = []
        return [FakeProcess(pid, self) for pid in self.pids]

    def kill_processes(self, name: str) -> int:
        self.lookups_at_kill = self.lookups
        procs = self.find_processes(name)
        for proc in procs:
            proc.kill()
        return len(procs)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by the CLI's configure_logging()."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler).__name__ in ("RichHandler", "StreamHandler"):
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def target(home: Path) -> InstallationTarget:
    return InstallationTarget.for_home(home)


@pytest.fixture
def darwin(monkeypatch):
    """Pass the host OS check regardless of where tests run."""
    monkeypatch.setattr(
        "xcbridgectl.service.platform.check_platform", lambda: None
    )


@pytest.fixture
def launchctl(monkeypatch, darwin) -> FakeLaunchctl:
    """Fake launchctl. Implies a macOS host."""
    fake = FakeLaunchctl()
    monkeypatch.setattr("xcbridgectl.service.launchd.run_launchctl", fake)
    return fake


@pytest.fixture
def processes(monkeypatch) -> FakeProcessTable:
    table = FakeProcessTable()
    monkeypatch.setattr(
        "xcbridgectl.service.process.find_processes", table.find_processes
    )
    monkeypatch.setattr(
        "xcbridgectl.service.process.kill_processes", table.kill_processes
    )
    return table


@pytest.fixture
def service_started(launchctl: FakeLaunchctl, processes: FakeProcessTable):
    """Make a successful launchctl load spawn the service process."""

    def spawn():
        processes.pids = [launchctl.pid]

    launchctl.on_load = spawn
    return launchctl


@pytest.fixture
def macos(monkeypatch) -> PlatformInfo:
    """Pretend platform validation succeeded."""
    info = PlatformInfo(system="darwin", toolchain_version="Xcode 16.0")
    monkeypatch.setattr("xcbridgectl.service.platform.validate", lambda: info)
    return info


@pytest.fixture
def source_binary(tmp_path: Path) -> Path:
    """A built binary in a fake project directory."""
    project = tmp_path / "project"
    project.mkdir()
    binary = project / "xcbridge"
    binary.write_bytes(b"\x7fELF fake xcbridge binary")
    return binary


@pytest.fixture
def manager(target: InstallationTarget, tmp_path: Path) -> LifecycleManager:
    """Lifecycle manager with no waits and a private lock file."""
    return LifecycleManager(
        target,
        controller=ServiceController(grace_period=0),
        uninstaller=Uninstaller(poll_interval=0),
        lock_path=tmp_path / "xcbridgectl.lock",
    )


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})
