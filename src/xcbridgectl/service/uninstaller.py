"""Stop the service and remove everything the installer created."""

import logging
import time
from collections.abc import Callable
from pathlib import Path

from xcbridgectl.config.paths import BINARY_NAME, SERVICE_LABEL, InstallationTarget
from xcbridgectl.service import launchd, process
from xcbridgectl.service.base import (
    CommandOutcome,
    LogPurgeMode,
    RemovalReport,
    ServiceState,
    StopOutcome,
)

logger = logging.getLogger(__name__)

STOP_POLL_INTERVAL = 1.0
STOP_POLL_ATTEMPTS = 10


class Uninstaller:
    """Stops the service with graceful-wait-then-kill escalation and cleans up.

    State machine: RUNNING|STOPPED|NOT_REGISTERED -> STOPPING -> STOPPED -> REMOVED.
    """

    def __init__(
        self,
        process_name: str = BINARY_NAME,
        label: str = SERVICE_LABEL,
        poll_interval: float = STOP_POLL_INTERVAL,
        poll_attempts: int = STOP_POLL_ATTEMPTS,
    ):
        self._process_name = process_name
        self._label = label
        self._poll_interval = poll_interval
        self._poll_attempts = poll_attempts
        self._state = ServiceState.NOT_REGISTERED

    @property
    def state(self) -> ServiceState:
        return self._state

    def stop(self, target: InstallationTarget) -> StopOutcome:
        """Stop the service. Best-effort; never raises for service conditions.

        Returns:
            ALREADY_ABSENT if no descriptor exists, FORCE_KILLED if the poll
            budget ran out, STOPPED otherwise.
        """
        if not target.descriptor_path.exists():
            logger.info("No service descriptor found")
            self._state = ServiceState.STOPPED
            return StopOutcome.ALREADY_ABSENT

        logger.info("Stopping %s service...", self._process_name)
        self._state = ServiceState.STOPPING

        outcome = launchd.unload(target.descriptor_path, self._label)
        if outcome is CommandOutcome.FAILED:
            logger.warning("launchctl could not unload %s", target.descriptor_path)

        attempts = 0
        while process.is_running(self._process_name) and attempts < self._poll_attempts:
            time.sleep(self._poll_interval)
            attempts += 1

        result = StopOutcome.STOPPED
        if process.is_running(self._process_name):
            logger.warning("Service did not stop gracefully, forcing termination")
            process.kill_processes(self._process_name)
            result = StopOutcome.FORCE_KILLED
            time.sleep(self._poll_interval)
            if process.is_running(self._process_name):
                logger.error(
                    "%s is still running after forced termination", self._process_name
                )

        self._state = ServiceState.STOPPED
        logger.info("Service stopped")
        return result

    def remove_files(self, target: InstallationTarget) -> RemovalReport:
        """Remove the installed binary and descriptor, each independently."""
        report = RemovalReport()

        if _remove(target.binary_path, "binary"):
            report.binary_removed = True
            report.removed_paths.append(target.binary_path)

        if _remove(target.descriptor_path, "descriptor"):
            report.descriptor_removed = True
            report.removed_paths.append(target.descriptor_path)

        self._state = ServiceState.REMOVED
        if report.nothing_removed:
            logger.info("No xcbridge files found to remove")
        return report

    def purge_logs(
        self,
        target: InstallationTarget,
        mode: LogPurgeMode,
        confirm: Callable[[str], bool] | None = None,
    ) -> list[Path]:
        """Delete service log files according to mode.

        Args:
            target: Installation target holding the log paths.
            mode: KEEP, FORCE, or PROMPT.
            confirm: Asked in PROMPT mode; returns True to delete.

        Returns:
            Paths that were deleted.
        """
        if mode is LogPurgeMode.KEEP:
            return []

        existing = [path for path in target.log_paths if path.exists()]
        if not existing:
            return []

        if mode is LogPurgeMode.PROMPT:
            if confirm is None or not confirm("Remove log files?"):
                logger.info("Log files preserved")
                return []

        removed = []
        for path in existing:
            if _remove(path, "log file"):
                removed.append(path)
        return removed


def _remove(path: Path, kind: str) -> bool:
    """Remove a file if present. Returns True if it was removed."""
    if not path.exists() and not path.is_symlink():
        return False
    logger.info("Removing %s: %s", kind, path)
    path.unlink(missing_ok=True)
    return True
