"""Copy the located binary into the managed install location."""

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path

from xcbridgectl.config.paths import InstallationTarget

logger = logging.getLogger(__name__)

EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
INSTALL_MODE = 0o755


def is_on_search_path(directory: Path, path_env: str | None = None) -> bool:
    """Check whether a directory is on PATH."""
    if path_env is None:
        path_env = os.environ.get("PATH", "")
    resolved = directory.resolve()
    for entry in path_env.split(os.pathsep):
        if entry and Path(entry).expanduser().resolve() == resolved:
            return True
    return False


def install(binary: Path, target: InstallationTarget) -> Path:
    """Install the binary at target.binary_path and make it executable.

    The binary is copied to a temporary file beside the destination, marked
    executable only after the copy completes, then renamed into place.

    Returns:
        The installed binary path.
    """
    destination = target.binary_path
    install_dir = target.install_dir
    install_dir.mkdir(parents=True, exist_ok=True)

    if binary.resolve() == destination.resolve():
        logger.info("Binary already at %s", destination)
    else:
        logger.info("Installing %s to %s", binary, install_dir)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.", dir=install_dir
        )
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            shutil.copyfile(binary, tmp_path)
            tmp_path.chmod(INSTALL_MODE)
            tmp_path.replace(destination)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    destination.chmod(destination.stat().st_mode | EXECUTABLE_BITS)

    if not is_on_search_path(install_dir):
        logger.warning(
            "%s is not in your PATH. Add the following to your shell profile:\n"
            '  export PATH="$PATH:%s"',
            install_dir,
            install_dir,
        )

    return destination
