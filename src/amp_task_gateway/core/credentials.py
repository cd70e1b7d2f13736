"""Credential Resolver - Bearer token loading for the remote API.

The token is looked up, in order, in:

1. the Amp secrets file under the service-qualified key,
2. the same file under the generic ``apiKey`` key,
3. the ``AMP_API_KEY`` environment variable.

A secrets file that is missing or unreadable is not an error by itself; the
resolver falls through to the environment and only fails when that is empty too.
Nothing is cached unless a TTL is configured, and failures are never cached.
"""

from __future__ import annotations

import json
import logging
import os
import time
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from .config import API_KEY_ENV_VAR, DEFAULT_SECRETS_PATH, GatewayConfig
from .exceptions import NoCredentialError

logger = logging.getLogger(__name__)

SERVICE_KEY = "apiKey@https://ampcode.com/"
GENERIC_KEY = "apiKey"


class CredentialSource(Enum):
    """Where a resolved token came from."""

    SERVICE_KEY = "service_key"
    GENERIC_KEY = "generic_key"
    ENVIRONMENT = "environment"


class ResolvedCredential(BaseModel):
    """A bearer token together with its source."""

    token: str
    source: CredentialSource

    def __repr__(self) -> str:
        return f"ResolvedCredential(source={self.source.value!r}, token='***')"

    __str__ = __repr__


class CredentialResolver:
    """Resolves the bearer token used for remote calls."""

    def __init__(
        self,
        secrets_path: Path = DEFAULT_SECRETS_PATH,
        env_var: str = API_KEY_ENV_VAR,
        cache_ttl: float = 0.0,
        environ: Mapping[str, str] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the resolver.

        Args:
            secrets_path: Path of the JSON secrets file.
            env_var: Environment variable used as the last resort.
            cache_ttl: Seconds a successful resolution is reused. 0 disables caching.
            environ: Environment mapping. Defaults to ``os.environ`` at call time.
            clock: Monotonic clock, injectable for tests.
        """
        self.secrets_path = secrets_path
        self.env_var = env_var
        self.cache_ttl = cache_ttl
        self._environ = environ
        self._clock = clock
        self._cached: ResolvedCredential | None = None
        self._cached_at = 0.0

    @classmethod
    def from_config(cls, config: GatewayConfig) -> CredentialResolver:
        """Create a resolver from gateway settings."""
        return cls(
            secrets_path=config.secrets_path,
            env_var=config.api_key_env,
            cache_ttl=config.credential_ttl,
        )

    def resolve(self) -> str:
        """Return the bearer token.

        Raises:
            NoCredentialError: If no source yields a non-empty token.
        """
        return self.resolve_with_source().token

    def resolve_with_source(self) -> ResolvedCredential:
        """Return the bearer token and the source that supplied it.

        Raises:
            NoCredentialError: If no source yields a non-empty token.
        """
        if self._cached is not None and self._cache_is_fresh():
            return self._cached

        resolved = self._resolve_uncached()
        if self.cache_ttl > 0:
            self._cached = resolved
            self._cached_at = self._clock()
        return resolved

    def invalidate(self) -> None:
        """Drop any cached token so the next call re-reads every source."""
        self._cached = None
        self._cached_at = 0.0

    def _cache_is_fresh(self) -> bool:
        return self.cache_ttl > 0 and (self._clock() - self._cached_at) < self.cache_ttl

    def _resolve_uncached(self) -> ResolvedCredential:
        secrets = self._load_secrets()
        if secrets is not None:
            service_token = secrets.get(SERVICE_KEY)
            if isinstance(service_token, str) and service_token:
                return ResolvedCredential(token=service_token, source=CredentialSource.SERVICE_KEY)
            generic_token = secrets.get(GENERIC_KEY)
            if isinstance(generic_token, str) and generic_token:
                return ResolvedCredential(token=generic_token, source=CredentialSource.GENERIC_KEY)

        environ = os.environ if self._environ is None else self._environ
        env_token = environ.get(self.env_var)
        if env_token:
            return ResolvedCredential(token=env_token, source=CredentialSource.ENVIRONMENT)

        raise NoCredentialError(self.secrets_path, self.env_var)

    def _load_secrets(self) -> dict[str, Any] | None:
        """Read the secrets file, returning None when it cannot be used."""
        try:
            with open(self.secrets_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load secrets: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(
                f"Failed to load secrets: {self.secrets_path} does not contain a JSON object"
            )
            return None
        return data
