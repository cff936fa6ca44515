"""Launchd user agent registration and start confirmation for macOS."""

import logging
import subprocess
import time
from pathlib import Path

from xcbridgectl.config.paths import BINARY_NAME, SERVICE_LABEL
from xcbridgectl.errors import ServiceStartError
from xcbridgectl.service import process
from xcbridgectl.service.base import CommandOutcome, ServiceState, ServiceStatus
from xcbridgectl.service.descriptor import ServiceDescriptor

logger = logging.getLogger(__name__)

START_GRACE_SECONDS = 2.0

# stderr fragments launchctl prints when there is nothing to unload
_NOT_LOADED_MARKERS = (
    "could not find specified service",
    "no such process",
    "not loaded",
)


def run_launchctl(*args: str) -> tuple[int, str, str]:
    """Run a launchctl command.

    Returns:
        Tuple of (returncode, stdout, stderr).
    """
    try:
        result = subprocess.run(
            ["launchctl", *args],
            capture_output=True,
            text=True,
            timeout=30,
        )
    except FileNotFoundError:
        return 127, "", "launchctl not found"
    except subprocess.TimeoutExpired:
        return 124, "", f"launchctl {' '.join(args)} timed out"
    return result.returncode, result.stdout, result.stderr


def is_loaded(label: str = SERVICE_LABEL) -> bool:
    """Check whether launchd currently knows about the label."""
    returncode, _, _ = run_launchctl("list", label)
    return returncode == 0


def unload(descriptor_path: Path, label: str = SERVICE_LABEL) -> CommandOutcome:
    """Unregister the service.

    Returns:
        NOT_APPLICABLE when nothing was registered, SUCCEEDED on unload,
        FAILED when launchctl reported an error.
    """
    if not is_loaded(label):
        return CommandOutcome.NOT_APPLICABLE

    if descriptor_path.exists():
        returncode, _, stderr = run_launchctl("unload", str(descriptor_path))
    else:
        returncode, _, stderr = run_launchctl("remove", label)

    if any(marker in stderr.lower() for marker in _NOT_LOADED_MARKERS):
        return CommandOutcome.NOT_APPLICABLE
    if returncode != 0:
        logger.debug("launchctl unload failed (%d): %s", returncode, stderr.strip())
        return CommandOutcome.FAILED
    return CommandOutcome.SUCCEEDED


def load(descriptor_path: Path) -> CommandOutcome:
    """Register and start the service from its descriptor."""
    returncode, _, stderr = run_launchctl("load", str(descriptor_path))
    # launchctl load exits 0 on some errors and only reports them on stderr
    if returncode != 0 or "error" in stderr.lower():
        logger.debug("launchctl load failed (%d): %s", returncode, stderr.strip())
        return CommandOutcome.FAILED
    return CommandOutcome.SUCCEEDED


class ServiceController:
    """Registers the launchd agent and confirms it is running.

    State machine: NOT_REGISTERED -> REGISTERED -> STARTING -> RUNNING,
    or STARTING -> FAILED.
    """

    def __init__(
        self,
        process_name: str = BINARY_NAME,
        grace_period: float = START_GRACE_SECONDS,
    ):
        self._process_name = process_name
        self._grace_period = grace_period
        self._state = ServiceState.NOT_REGISTERED

    @property
    def state(self) -> ServiceState:
        return self._state

    def start(self, descriptor: ServiceDescriptor, descriptor_path: Path) -> ServiceStatus:
        """Write the descriptor, (re)load the service and wait for it to appear.

        Args:
            descriptor: Descriptor to register.
            descriptor_path: Where the descriptor is persisted.

        Returns:
            ServiceStatus in the RUNNING state.

        Raises:
            ServiceStartError: If launchctl fails or no process appears
                within the grace period.
        """
        error_log = descriptor.stderr_path
        hint = f"Check logs at: {error_log}"

        descriptor.write(descriptor_path)
        descriptor.stderr_path.parent.mkdir(parents=True, exist_ok=True)

        outcome = unload(descriptor_path, descriptor.label)
        if outcome is CommandOutcome.FAILED:
            self._state = ServiceState.FAILED
            raise ServiceStartError(
                f"Failed to unload existing {descriptor.label} service", hint=hint
            )
        if outcome is CommandOutcome.SUCCEEDED:
            logger.info("Unloaded previously registered %s service", descriptor.label)

        logger.info("Loading %s service", self._process_name)
        if load(descriptor_path) is CommandOutcome.FAILED:
            self._state = ServiceState.FAILED
            raise ServiceStartError(
                f"Failed to load {descriptor_path} with launchctl", hint=hint
            )
        self._state = ServiceState.REGISTERED

        self._state = ServiceState.STARTING
        time.sleep(self._grace_period)

        pid = process.find_pid(self._process_name)
        if pid is None:
            self._state = ServiceState.FAILED
            raise ServiceStartError(
                f"Failed to start {self._process_name} service", hint=hint
            )

        self._state = ServiceState.RUNNING
        logger.info("%s service started successfully (PID %d)", self._process_name, pid)
        return ServiceStatus(state=ServiceState.RUNNING, pid=pid)
