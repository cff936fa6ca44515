"""Locate the xcbridge executable to install."""

import logging
from pathlib import Path

from xcbridgectl.config.paths import BINARY_NAME
from xcbridgectl.errors import BinaryNotFoundError

logger = logging.getLogger(__name__)

RELEASE_BUILD_PATH = Path("target") / "release" / BINARY_NAME
DEBUG_BUILD_PATH = Path("target") / "debug" / BINARY_NAME


def candidate_paths(explicit_path: Path | None, cwd: Path) -> list[Path]:
    """Get candidate binary paths in precedence order.

    Order:
    1. Explicit path argument
    2. ./xcbridge
    3. ./target/release/xcbridge
    4. ./target/debug/xcbridge
    """
    candidates = [cwd / BINARY_NAME, cwd / RELEASE_BUILD_PATH, cwd / DEBUG_BUILD_PATH]
    if explicit_path is not None:
        candidates.insert(0, explicit_path)
    return candidates


def locate(explicit_path: Path | None = None, cwd: Path | None = None) -> Path:
    """Find the binary to install. First match wins.

    Args:
        explicit_path: Operator-supplied path override.
        cwd: Directory to search relative to. Defaults to the current directory.

    Returns:
        Path to an existing binary file.

    Raises:
        BinaryNotFoundError: If no candidate exists.
    """
    cwd = cwd or Path.cwd()
    debug_path = cwd / DEBUG_BUILD_PATH

    if explicit_path is not None and not explicit_path.is_file():
        logger.warning("Binary path %s does not exist, searching defaults", explicit_path)

    for candidate in candidate_paths(explicit_path, cwd):
        if not candidate.is_file():
            continue
        if candidate == debug_path and candidate != explicit_path:
            logger.warning(
                "Using debug build - consider using release build for better performance"
            )
        return candidate

    raise BinaryNotFoundError(
        "xcbridge binary not found",
        hint="Build with: cargo build --release",
    )
