"""High-level install/uninstall pipelines."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from filelock import FileLock, Timeout

from xcbridgectl.config.models import Configuration
from xcbridgectl.config.paths import (
    BINARY_NAME,
    SERVICE_LABEL,
    InstallationTarget,
    get_lock_path,
)
from xcbridgectl.errors import LifecycleLockError
from xcbridgectl.service import descriptor as descriptor_generator
from xcbridgectl.service import installer, launchd, locator, platform, process
from xcbridgectl.service.base import (
    LogPurgeMode,
    RemovalReport,
    ServiceState,
    ServiceStatus,
    StopOutcome,
)
from xcbridgectl.service.descriptor import ServiceDescriptor
from xcbridgectl.service.launchd import ServiceController
from xcbridgectl.service.platform import PlatformInfo
from xcbridgectl.service.uninstaller import Uninstaller

logger = logging.getLogger(__name__)

LOCK_TIMEOUT_SECONDS = 30.0


@dataclass
class InstallResult:
    """Outcome of a successful install."""

    platform: PlatformInfo
    source_binary: Path
    installed_binary: Path
    descriptor: ServiceDescriptor
    status: ServiceStatus


@dataclass
class UninstallResult:
    """Outcome of an uninstall."""

    stop_outcome: StopOutcome
    removal: RemovalReport
    purged_logs: list[Path] = field(default_factory=list)


class LifecycleManager:
    """Orchestrates the install and uninstall pipelines.

    Example:
        manager = LifecycleManager(InstallationTarget.for_home())
        result = manager.install(Configuration(port=8080))
    """

    def __init__(
        self,
        target: InstallationTarget,
        controller: ServiceController | None = None,
        uninstaller: Uninstaller | None = None,
        lock_path: Path | None = None,
        lock_timeout: float = LOCK_TIMEOUT_SECONDS,
    ):
        self._target = target
        self._controller = controller or ServiceController()
        self._uninstaller = uninstaller or Uninstaller()
        self._lock_path = lock_path or get_lock_path()
        self._lock_timeout = lock_timeout

    @property
    def target(self) -> InstallationTarget:
        return self._target

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold the cross-invocation lifecycle lock."""
        lock = FileLock(str(self._lock_path), timeout=self._lock_timeout)
        try:
            with lock:
                yield
        except Timeout as e:
            raise LifecycleLockError(
                "Another xcbridgectl install or uninstall is in progress",
                hint=f"Wait for it to finish or remove {self._lock_path}",
            ) from e

    def install(
        self, config: Configuration, cwd: Path | None = None
    ) -> InstallResult:
        """Validate, install the binary, write the descriptor and start the service.

        Raises:
            XcbridgeError: On any fatal pre-flight or start failure. Files
                already installed are left in place if only startup fails.
        """
        info = platform.validate()
        source = locator.locate(config.binary_path, cwd=cwd)
        logger.info("Using binary: %s", source)

        with self._locked():
            installed = installer.install(source, self._target)
            descriptor = descriptor_generator.generate(config, self._target)
            status = self._controller.start(descriptor, self._target.descriptor_path)

        return InstallResult(
            platform=info,
            source_binary=source,
            installed_binary=installed,
            descriptor=descriptor,
            status=status,
        )

    def uninstall(
        self,
        log_mode: LogPurgeMode = LogPurgeMode.PROMPT,
        confirm: Callable[[str], bool] | None = None,
    ) -> UninstallResult:
        """Stop the service, remove installed files and handle logs.

        Raises:
            UnsupportedPlatformError: Host OS is not macOS.
            OSError: On an unrecoverable filesystem error.
        """
        platform.check_platform()

        with self._locked():
            outcome = self._uninstaller.stop(self._target)
            removal = self._uninstaller.remove_files(self._target)
            purged = self._uninstaller.purge_logs(self._target, log_mode, confirm)

        return UninstallResult(stop_outcome=outcome, removal=removal, purged_logs=purged)

    def status(self) -> ServiceStatus:
        """Get current service status without changing anything."""
        descriptor_present = self._target.descriptor_path.exists()
        pid = process.find_pid(BINARY_NAME)

        if pid is not None:
            return ServiceStatus(state=ServiceState.RUNNING, pid=pid)

        if not descriptor_present:
            return ServiceStatus(state=ServiceState.NOT_REGISTERED)

        if launchd.is_loaded(SERVICE_LABEL):
            return ServiceStatus(
                state=ServiceState.FAILED,
                message=f"Registered but not running, see {self._target.stderr_log_path}",
            )
        return ServiceStatus(state=ServiceState.STOPPED)
