"""Configuration Model - Pydantic model for gateway settings.

Every setting has a default suitable for running the gateway locally.
Environment variables override the defaults through ``GatewayConfig.from_env()``;
CLI options in turn override the environment.

Environment Variable Mapping:
| Config Key         | Environment Variable        |
|--------------------|-----------------------------|
| host               | HOST                        |
| port               | PORT                        |
| api_host           | AMP_API_HOST                |
| secrets_path       | AMP_SECRETS_PATH            |
| static_dir         | AMP_GATEWAY_STATIC_DIR      |
| request_timeout    | AMP_GATEWAY_TIMEOUT         |
| credential_ttl     | AMP_GATEWAY_CREDENTIAL_TTL  |
| log_level          | AMP_GATEWAY_LOG_LEVEL       |
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_PORT = 3847
DEFAULT_API_HOST = "ampcode.com"
DEFAULT_SECRETS_PATH = Path.home() / ".local" / "share" / "amp" / "secrets.json"
DEFAULT_STATIC_DIR = Path(__file__).resolve().parent.parent / "static"
API_KEY_ENV_VAR = "AMP_API_KEY"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

ENV_VAR_MAP: dict[str, str] = {
    "host": "HOST",
    "port": "PORT",
    "api_host": "AMP_API_HOST",
    "secrets_path": "AMP_SECRETS_PATH",
    "static_dir": "AMP_GATEWAY_STATIC_DIR",
    "request_timeout": "AMP_GATEWAY_TIMEOUT",
    "credential_ttl": "AMP_GATEWAY_CREDENTIAL_TTL",
    "log_level": "AMP_GATEWAY_LOG_LEVEL",
}

_INT_FIELDS = {"port"}
_FLOAT_FIELDS = {"request_timeout", "credential_ttl"}


# =============================================================================
# Main Configuration Model
# =============================================================================


class GatewayConfig(BaseModel):
    """Settings for the task gateway."""

    host: str = Field(
        default="127.0.0.1",
        description="Interface the local HTTP server binds to. Overridden by HOST.",
    )
    port: int = Field(
        default=DEFAULT_PORT,
        ge=0,
        le=65535,
        description="Local listening port. Overridden by PORT.",
    )
    api_host: str = Field(
        default=DEFAULT_API_HOST,
        description="Remote API host name. Overridden by AMP_API_HOST.",
    )
    secrets_path: Path = Field(
        default=DEFAULT_SECRETS_PATH,
        description="Amp secrets file holding the API key. Overridden by AMP_SECRETS_PATH.",
    )
    api_key_env: str = Field(
        default=API_KEY_ENV_VAR,
        description="Environment variable consulted when the secrets file has no key.",
    )
    static_dir: Path = Field(
        default=DEFAULT_STATIC_DIR,
        description="Root directory for the front-end. Overridden by AMP_GATEWAY_STATIC_DIR.",
    )
    request_timeout: float = Field(
        default=30.0,
        ge=0,
        description="Seconds to wait for the remote API; 0 disables the timeout.",
    )
    credential_ttl: float = Field(
        default=0.0,
        ge=0,
        description="Seconds a resolved API key may be reused; 0 re-reads it on every call.",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level name. Overridden by AMP_GATEWAY_LOG_LEVEL.",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            expected = ", ".join(LOG_LEVELS)
            raise ValueError(f"unknown log level {value!r}, expected one of {expected}")
        return level

    @property
    def api_base_url(self) -> str:
        """Base URL of the remote API."""
        return f"https://{self.api_host}"

    @property
    def timeout_seconds(self) -> float | None:
        """Timeout suitable for httpx, or None when disabled."""
        return self.request_timeout or None

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> GatewayConfig:
        """Build a config from environment variables plus explicit overrides.

        Args:
            environ: Mapping to read variables from. Defaults to ``os.environ``.
            **overrides: Field values that win over the environment. ``None``
                values are ignored so CLI options can be passed through as-is.

        Returns:
            The populated configuration.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        for field_name, env_var in ENV_VAR_MAP.items():
            raw = env.get(env_var)
            if raw is None or raw.strip() == "":
                continue
            parsed = _parse_env_value(field_name, env_var, raw.strip())
            if parsed is not None:
                values[field_name] = parsed

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def _parse_env_value(field_name: str, env_var: str, raw: str) -> Any:
    if field_name in _INT_FIELDS:
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Ignoring {env_var}={raw!r}: not an integer")
            return None
    if field_name in _FLOAT_FIELDS:
        try:
            return float(raw)
        except ValueError:
            logger.warning(f"Ignoring {env_var}={raw!r}: not a number")
            return None
    if field_name == "log_level" and raw.upper() not in LOG_LEVELS:
        logger.warning(f"Ignoring {env_var}={raw!r}: not a log level")
        return None
    if field_name in ("secrets_path", "static_dir"):
        return Path(raw).expanduser()
    return raw
