"""Launchd service lifecycle management for xcbridge.

Installs the xcbridge binary as a macOS user agent, confirms it starts,
and removes it again:

Example:
    from xcbridgectl.config import Configuration, InstallationTarget
    from xcbridgectl.service import LifecycleManager

    manager = LifecycleManager(InstallationTarget.for_home())
    result = manager.install(Configuration(port=8080))
    manager.uninstall()
"""

from xcbridgectl.service.base import (
    CommandOutcome,
    LogPurgeMode,
    RemovalReport,
    ServiceState,
    ServiceStatus,
    StopOutcome,
)
from xcbridgectl.service.descriptor import RestartPolicy, ServiceDescriptor
from xcbridgectl.service.manager import InstallResult, LifecycleManager, UninstallResult

__all__ = [
    "CommandOutcome",
    "InstallResult",
    "LifecycleManager",
    "LogPurgeMode",
    "RemovalReport",
    "RestartPolicy",
    "ServiceDescriptor",
    "ServiceState",
    "ServiceStatus",
    "StopOutcome",
    "UninstallResult",
]
