"""Configuration and install locations for xcbridgectl."""

from xcbridgectl.config.models import DEFAULT_PORT, Configuration
from xcbridgectl.config.paths import (
    BINARY_NAME,
    SERVICE_LABEL,
    InstallationTarget,
    get_lock_path,
)

__all__ = [
    "BINARY_NAME",
    "DEFAULT_PORT",
    "SERVICE_LABEL",
    "Configuration",
    "InstallationTarget",
    "get_lock_path",
]
