"""Process lookup by service identity.

Liveness is approximated by an exact process-name match, the same way
`pgrep -x` works. Multiple processes sharing the name cannot be told apart.
"""

import logging

import psutil

logger = logging.getLogger(__name__)


def find_processes(name: str) -> list[psutil.Process]:
    """Get processes whose name exactly matches.

    Args:
        name: Process name to match.

    Returns:
        Matching processes, possibly empty.
    """
    matches = []
    for proc in psutil.process_iter(["name"]):
        try:
            if proc.info.get("name") == name:
                matches.append(proc)
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return matches


def find_pid(name: str) -> int | None:
    """Get the pid of the first matching process, or None."""
    procs = find_processes(name)
    return procs[0].pid if procs else None


def is_running(name: str) -> bool:
    """Check if any process with the given name is alive."""
    return bool(find_processes(name))


def kill_processes(name: str) -> int:
    """Force-kill every process with the given name (SIGKILL).

    Returns:
        Number of processes signalled.
    """
    killed = 0
    for proc in find_processes(name):
        try:
            proc.kill()
            killed += 1
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied as e:
            logger.warning("Not permitted to kill pid %s: %s", proc.pid, e)
    return killed
