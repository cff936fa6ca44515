"""Configuration models using Pydantic."""

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULT_PORT = 9090

# Characters an XML 1.0 document cannot carry
XML_ILLEGAL_CHARS = re.compile(
    "[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)


class Configuration(BaseModel):
    """Operator-supplied install parameters.

    Immutable once parsed. An absent or empty API key disables
    authentication on the service.
    """

    model_config = ConfigDict(frozen=True)

    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    api_key: SecretStr | None = None
    binary_path: Path | None = None

    @field_validator("api_key", mode="before")
    @classmethod
    def _empty_key_is_none(cls, value):
        if value is None:
            return None
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        return value or None

    @field_validator("api_key")
    @classmethod
    def _xml_safe_key(cls, value: SecretStr | None) -> SecretStr | None:
        if value is not None and XML_ILLEGAL_CHARS.search(value.get_secret_value()):
            raise ValueError("API key contains characters XML cannot represent")
        return value

    @field_validator("binary_path")
    @classmethod
    def _expand_binary_path(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None

    @property
    def auth_enabled(self) -> bool:
        """Whether the service will require an API key."""
        return self.api_key is not None

    def api_key_value(self) -> str | None:
        """Get the plain API key, or None when authentication is disabled."""
        return self.api_key.get_secret_value() if self.api_key else None
