"""Errors raised by xcbridgectl lifecycle operations.

Every fatal condition derives from XcbridgeError so the CLI can report it
and exit non-zero from a single place.
"""


class XcbridgeError(Exception):
    """Base error for fatal lifecycle failures.

    Args:
        message: Description of what went wrong.
        hint: Optional remediation shown to the operator.
    """

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint


class UnsupportedPlatformError(XcbridgeError):
    """Host OS is not macOS."""


class PrerequisiteMissingError(XcbridgeError):
    """Required toolchain (Xcode) is not installed."""


class BinaryNotFoundError(XcbridgeError):
    """No xcbridge executable could be located."""


class ServiceStartError(XcbridgeError):
    """Service was installed but did not reach the running state."""


class LifecycleLockError(XcbridgeError):
    """Another xcbridgectl invocation holds the lifecycle lock."""
