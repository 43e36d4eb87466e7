"""Environment-based configuration.

ServiceNow connection settings use the SERVICENOW_ prefix, pipeline
settings the GLIDEQUERY_ prefix. For example:
    SERVICENOW_INSTANCE_URL=https://dev12345.service-now.com
    SERVICENOW_USERNAME=admin
    GLIDEQUERY_TIMEOUT=45000
    LOG_LEVEL=debug

Numeric pipeline settings are clamped to a safe range; unparseable values
fall back to the default instead of failing startup.
"""

import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from glidequery_core.scripts.catalog import PatternCatalog

_HOSTNAME = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

LOG_LEVELS = ("debug", "info", "warn", "warning", "error")

# field name -> (default, min, max)
_NUMERIC_BOUNDS = {
    "timeout": (30000, 1000, 60000),
    "max_script_length": (10000, 100, 100000),
    "test_max_results": (100, 1, 1000),
}


def clamp_number(value: Any, default: int, minimum: int, maximum: int) -> int:
    """Parse an integer setting, falling back to default and clamping to range."""
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return max(minimum, min(maximum, parsed))


def is_valid_instance_url(url: str) -> bool:
    """True for https URLs with a well-formed hostname."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme != "https" or not parsed.hostname:
        return False
    return bool(_HOSTNAME.match(parsed.hostname))


class ServiceNowSettings(BaseSettings):
    """ServiceNow instance connection settings."""

    instance_url: str
    username: str
    password: SecretStr
    script_endpoint: str = "/api/now/v1/script/execute"

    model_config = SettingsConfigDict(env_prefix="SERVICENOW_")

    @field_validator("instance_url")
    @classmethod
    def _check_instance_url(cls, value: str) -> str:
        if not is_valid_instance_url(value):
            raise ValueError(
                f"Invalid ServiceNow URL format: {value}. URL must be a valid HTTPS URL "
                f"(e.g., https://instance.service-now.com)"
            )
        return value.rstrip("/")


class GlideQuerySettings(BaseSettings):
    """Script pipeline settings.

    timeout is in milliseconds and is the default passed to the runner.
    """

    timeout: int = 30000
    max_script_length: int = 10000
    test_max_results: int = 100
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_prefix="GLIDEQUERY_")

    @field_validator("timeout", "max_script_length", "test_max_results", mode="before")
    @classmethod
    def _clamp(cls, value: Any, info: ValidationInfo) -> int:
        default, minimum, maximum = _NUMERIC_BOUNDS[info.field_name]
        return clamp_number(value, default, minimum, maximum)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.lower()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid LOG_LEVEL: {value}. Must be one of: debug, info, warn, error"
            )
        return level

    def catalog(self) -> PatternCatalog:
        """Default catalog with this configuration's length limit."""
        return PatternCatalog.default().merge(max_script_length=self.max_script_length)


@dataclass
class Settings:
    """All settings needed to run scripts against an instance."""

    servicenow: ServiceNowSettings
    glidequery: GlideQuerySettings


def load_settings() -> Settings:
    """
    Load settings from the environment.

    Raises:
        pydantic.ValidationError: If required settings are missing or invalid
    """
    return Settings(servicenow=ServiceNowSettings(), glidequery=GlideQuerySettings())
