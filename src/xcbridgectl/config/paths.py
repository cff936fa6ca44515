"""Centralized path management for xcbridgectl.

All locations follow fixed per-user macOS conventions and are derived from
the user's home directory:

- Binary: ~/.local/bin/xcbridge
- Descriptor: ~/Library/LaunchAgents/ai.aptove.xcbridge.plist
- Logs: ~/Library/Logs/xcbridge.log and ~/Library/Logs/xcbridge.error.log
- Working directory: ~
"""

import tempfile
from dataclasses import dataclass
from pathlib import Path

BINARY_NAME = "xcbridge"
SERVICE_LABEL = "ai.aptove.xcbridge"
LOCK_FILE_NAME = "xcbridgectl.lock"


def get_install_dir(home: Path) -> Path:
    """Get the directory the binary is installed into."""
    return home / ".local" / "bin"


def get_launch_agents_dir(home: Path) -> Path:
    """Get the per-user launchd agents directory."""
    return home / "Library" / "LaunchAgents"


def get_logs_dir(home: Path) -> Path:
    """Get the per-user logs directory."""
    return home / "Library" / "Logs"


def get_lock_path() -> Path:
    """Get the lifecycle lock file path.

    The lock lives in the system temp directory, outside the installed
    locations.
    """
    return Path(tempfile.gettempdir()) / LOCK_FILE_NAME


@dataclass(frozen=True)
class InstallationTarget:
    """Environment-derived locations for one run.

    Computed once from the home directory and never mutated.
    """

    binary_path: Path
    descriptor_path: Path
    stdout_log_path: Path
    stderr_log_path: Path
    working_directory: Path

    @classmethod
    def for_home(cls, home: Path | None = None) -> "InstallationTarget":
        """Build the target for a home directory (defaults to the current user's)."""
        home = home or Path.home()
        logs_dir = get_logs_dir(home)
        return cls(
            binary_path=get_install_dir(home) / BINARY_NAME,
            descriptor_path=get_launch_agents_dir(home) / f"{SERVICE_LABEL}.plist",
            stdout_log_path=logs_dir / f"{BINARY_NAME}.log",
            stderr_log_path=logs_dir / f"{BINARY_NAME}.error.log",
            working_directory=home,
        )

    @property
    def install_dir(self) -> Path:
        """Directory holding the installed binary."""
        return self.binary_path.parent

    @property
    def log_paths(self) -> tuple[Path, Path]:
        """Stdout and stderr log paths, in that order."""
        return self.stdout_log_path, self.stderr_log_path
