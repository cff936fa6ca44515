"""Host platform and toolchain validation."""

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass

from xcbridgectl.errors import PrerequisiteMissingError, UnsupportedPlatformError

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORM = "darwin"
TOOLCHAIN_COMMAND = "xcodebuild"


@dataclass(frozen=True)
class PlatformInfo:
    """Validated host information."""

    system: str
    toolchain_version: str


def _toolchain_version(command: str) -> str:
    """Get the first line of `xcodebuild -version`, or 'unknown'."""
    try:
        result = subprocess.run(
            [command, "-version"],
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Failed to query %s version: %s", command, e)
        return "unknown"

    lines = result.stdout.strip().splitlines()
    if result.returncode != 0 or not lines:
        return "unknown"
    return lines[0]


def check_platform() -> None:
    """Confirm the host OS is macOS.

    Raises:
        UnsupportedPlatformError: Host OS is not macOS.
    """
    if sys.platform != SUPPORTED_PLATFORM:
        raise UnsupportedPlatformError(
            f"xcbridge only runs on macOS (detected platform: {sys.platform})"
        )


def validate() -> PlatformInfo:
    """Confirm the host is macOS with Xcode available.

    Returns:
        PlatformInfo with a human-readable toolchain version.

    Raises:
        UnsupportedPlatformError: Host OS is not macOS.
        PrerequisiteMissingError: xcodebuild cannot be found.
    """
    check_platform()

    command = shutil.which(TOOLCHAIN_COMMAND)
    if command is None:
        raise PrerequisiteMissingError(
            "Xcode command line tools not found",
            hint="Install Xcode from the App Store or run: xcode-select --install",
        )

    version = _toolchain_version(command)
    logger.info("Xcode found: %s", version)
    return PlatformInfo(system=sys.platform, toolchain_version=version)
