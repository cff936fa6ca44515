"""Launchd service descriptor generation.

The descriptor is built as a structured object and rendered with plistlib,
so every interpolated value (port, API key, paths) is XML-escaped by the
serializer rather than pasted into a text template.
"""

import logging
import plistlib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any
from xml.parsers.expat import ExpatError

from xcbridgectl.config.models import Configuration
from xcbridgectl.config.paths import SERVICE_LABEL, InstallationTarget

logger = logging.getLogger(__name__)

DEFAULT_PATH_ENV = "/usr/local/bin:/usr/bin:/bin:/usr/sbin:/sbin"


class RestartPolicy(Enum):
    """Supervisor restart policy."""

    # Relaunch only after an unsuccessful exit
    RESTART_UNLESS_CLEAN_EXIT = "restart-unless-clean-exit"
    ALWAYS = "always"


def build_arguments(config: Configuration) -> list[str]:
    """Build the service argument list.

    Order is always --port <port> [--api-key <key>]. The API key pair is
    included only for a non-empty key.
    """
    args = ["--port", str(config.port)]
    api_key = config.api_key_value()
    if api_key:
        args.extend(["--api-key", api_key])
    return args


@dataclass(frozen=True)
class ServiceDescriptor:
    """Structured launchd agent definition."""

    label: str
    program: Path
    arguments: list[str]
    stdout_path: Path
    stderr_path: Path
    working_directory: Path
    restart_policy: RestartPolicy = RestartPolicy.RESTART_UNLESS_CLEAN_EXIT
    environment: dict[str, str] = field(
        default_factory=lambda: {"PATH": DEFAULT_PATH_ENV}
    )

    @property
    def program_arguments(self) -> list[str]:
        """Program path followed by its arguments, as launchd expects."""
        return [str(self.program), *self.arguments]

    def to_plist(self) -> dict[str, Any]:
        """Map the descriptor to a launchd property-list dictionary."""
        if self.restart_policy is RestartPolicy.RESTART_UNLESS_CLEAN_EXIT:
            keep_alive: bool | dict[str, bool] = {"SuccessfulExit": False}
        else:
            keep_alive = True

        return {
            "Label": self.label,
            "ProgramArguments": self.program_arguments,
            "RunAtLoad": True,
            "KeepAlive": keep_alive,
            "StandardOutPath": str(self.stdout_path),
            "StandardErrorPath": str(self.stderr_path),
            "WorkingDirectory": str(self.working_directory),
            "EnvironmentVariables": dict(self.environment),
        }

    def serialize(self) -> bytes:
        """Render the descriptor as an XML property list."""
        return plistlib.dumps(self.to_plist(), fmt=plistlib.FMT_XML)

    def write(self, path: Path) -> None:
        """Write the descriptor to disk, replacing any previous file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.serialize())
        logger.info("Wrote service descriptor %s", path)

    @classmethod
    def from_plist(cls, data: dict[str, Any]) -> "ServiceDescriptor":
        """Rebuild a descriptor from a parsed property list.

        Raises:
            ValueError: If required keys are missing.
        """
        try:
            program, *arguments = data["ProgramArguments"]
            label = data["Label"]
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid service descriptor: {e}") from e

        keep_alive = data.get("KeepAlive")
        if isinstance(keep_alive, dict) and keep_alive.get("SuccessfulExit") is False:
            policy = RestartPolicy.RESTART_UNLESS_CLEAN_EXIT
        else:
            policy = RestartPolicy.ALWAYS

        return cls(
            label=label,
            program=Path(program),
            arguments=list(arguments),
            stdout_path=Path(data.get("StandardOutPath", "")),
            stderr_path=Path(data.get("StandardErrorPath", "")),
            working_directory=Path(data.get("WorkingDirectory", "")),
            restart_policy=policy,
            environment=dict(data.get("EnvironmentVariables", {})),
        )

    @classmethod
    def read(cls, path: Path) -> "ServiceDescriptor":
        """Load a descriptor from disk.

        Raises:
            ValueError: If the file is not a valid descriptor.
        """
        with path.open("rb") as f:
            try:
                data = plistlib.load(f)
            except (plistlib.InvalidFileException, ExpatError) as e:
                raise ValueError(f"Invalid service descriptor: {e}") from e
        return cls.from_plist(data)


def generate(config: Configuration, target: InstallationTarget) -> ServiceDescriptor:
    """Build the descriptor for a configuration and install target.

    The program path is always the managed install location.
    """
    return ServiceDescriptor(
        label=SERVICE_LABEL,
        program=target.binary_path,
        arguments=build_arguments(config),
        stdout_path=target.stdout_log_path,
        stderr_path=target.stderr_log_path,
        working_directory=target.working_directory,
    )
