"""xcbridgectl - install and supervise xcbridge as a macOS LaunchAgent."""

__version__ = "0.1.0"
