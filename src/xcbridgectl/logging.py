"""Centralized logging configuration for xcbridgectl.

The CLI calls configure_logging() once before running a command.

Logging Levels:
- DEBUG: launchctl return codes and stderr, version probing
- INFO: Lifecycle steps (installing, loading, stopping, removing)
- WARNING: Non-fatal conditions (install dir not on PATH, debug build used,
  graceful stop timed out)
- ERROR: Conditions the operator must act on

API keys end up in service arguments, so every record passes through a
SecretRedactor before it is formatted.
"""

import logging
import os
import re
from dataclasses import dataclass, field

ENV_VAR = "XCBRIDGECTL_LOG_LEVEL"

DEFAULT_REDACT_PATTERNS: list[str] = [
    # CLI-style flags: --api-key secret or --api-key=secret
    r"--api-key(?:\s+|=)([^\s\"',\]]+)",
    # ENV-style assignments: API_KEY=secret or API_KEY: secret
    r"\b[A-Z0-9_]*(?:KEY|TOKEN|SECRET|PASSWORD)\s*[=:]\s*([^\s\"']{4,})",
]


@dataclass
class SecretRedactor:
    """Redacts sensitive values from log messages.

    Matches flag and assignment patterns plus any literal secrets registered
    with add_secret().
    """

    patterns: list[re.Pattern[str]] = field(default_factory=list)
    secrets: set[str] = field(default_factory=set)
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.patterns:
            self.patterns = [re.compile(p) for p in DEFAULT_REDACT_PATTERNS]

    def add_secret(self, value: str | None) -> None:
        """Register a literal value that must never be logged."""
        if value:
            self.secrets.add(value)

    def redact(self, text: str) -> str:
        """Redact secrets from text."""
        if not self.enabled or not text:
            return text
        result = text
        for secret in sorted(self.secrets, key=len, reverse=True):
            result = result.replace(secret, _mask(secret))
        for pattern in self.patterns:
            result = pattern.sub(self._mask_match, result)
        return result

    def _mask_match(self, match: re.Match[str]) -> str:
        full = match.group(0)
        token = match.group(1) if match.lastindex else full
        if "***" in token or "..." in token:
            return full
        return full.replace(token, _mask(token))


def _mask(token: str) -> str:
    """Mask a secret, keeping the first and last 2 chars of long values."""
    if len(token) < 12:
        return "***"
    return f"{token[:2]}...{token[-2:]}"


# Module-level redactor instance
_redactor = SecretRedactor()


def get_redactor() -> SecretRedactor:
    """Get the process-wide redactor."""
    return _redactor


class RedactingFilter(logging.Filter):
    """Logging filter that rewrites records through the redactor."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _redactor.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    Converts full module paths to short component names:
    - xcbridgectl.service.launchd -> launchd
    - xcbridgectl.cli.app -> app
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "xcbridgectl":
            record.component = parts[-1]
        else:
            record.component = parts[0]
        return super().format(record)


# Third-party loggers that are too noisy at INFO level
NOISY_LOGGERS = [
    "filelock",
]


def configure_logging(
    level: str | None = None,
    use_rich: bool = True,
) -> None:
    """Configure logging for xcbridgectl.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses XCBRIDGECTL_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful console output.
    """
    if level is None:
        level = os.environ.get(ENV_VAR, "INFO").upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            level = "INFO"

    log_level = getattr(logging, level)

    if use_rich:
        from rich.logging import RichHandler

        from xcbridgectl.cli.console import console

        handler: logging.Handler = RichHandler(
            console=console,
            rich_tracebacks=False,
            show_path=False,
            show_time=False,
            markup=False,
        )
        handler.setFormatter(ComponentFormatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            ComponentFormatter(
                "%(asctime)s | %(levelname)-8s | %(component)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    handler.addFilter(RedactingFilter())

    logging.basicConfig(
        level=log_level,
        handlers=[handler],
        force=True,
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
