"""Shared states and result types for service lifecycle operations."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ServiceState(Enum):
    """Service lifecycle state."""

    NOT_REGISTERED = "not_registered"
    REGISTERED = "registered"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    REMOVED = "removed"
    FAILED = "failed"


class CommandOutcome(Enum):
    """Result of a best-effort external command.

    NOT_APPLICABLE is a legitimate non-error outcome, e.g. unloading a
    service that was never loaded. Only FAILED is an error.
    """

    SUCCEEDED = "succeeded"
    NOT_APPLICABLE = "not_applicable"
    FAILED = "failed"


class StopOutcome(Enum):
    """How a stop request ended."""

    ALREADY_ABSENT = "already_absent"
    STOPPED = "stopped"
    FORCE_KILLED = "force_killed"


class LogPurgeMode(Enum):
    """What to do with service log files on uninstall."""

    PROMPT = "prompt"
    FORCE = "force"
    KEEP = "keep"


@dataclass
class ServiceStatus:
    """Service status information."""

    state: ServiceState
    pid: int | None = None
    message: str | None = None


@dataclass
class RemovalReport:
    """Which installed files were removed.

    A False entry means the file was already absent.
    """

    binary_removed: bool = False
    descriptor_removed: bool = False
    removed_paths: list[Path] = field(default_factory=list)

    @property
    def nothing_removed(self) -> bool:
        return not (self.binary_removed or self.descriptor_removed)
