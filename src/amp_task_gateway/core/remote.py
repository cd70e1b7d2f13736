"""Remote Call Adapter - Single RPC-style call to the Amp internal API.

Every call is one POST of ``{"method": ..., "params": ...}`` to
``https://<host>/api/internal?<method>``. The response body is a JSON envelope
``{"ok": bool, "data": ..., "error": {"message": str}}``; the HTTP status of
the response is not consulted. There are no retries.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel

from .config import DEFAULT_API_HOST, GatewayConfig
from .credentials import CredentialResolver
from .exceptions import InvalidResponseError, RemoteError, RemoteTimeoutError, TransportError

logger = logging.getLogger(__name__)

INTERNAL_API_PATH = "/api/internal"

# Identify this client to the remote service. Must stay byte-for-byte stable.
CLIENT_HEADERS: dict[str, str] = {
    "X-Amp-Client-Application": "AmpTaskViewer",
    "X-Amp-Client-Type": "web",
    "X-Amp-Client-Bundle": "amp-task-management",
}


class RemoteEnvelope(BaseModel):
    """Successful response envelope, kept verbatim for pass-through."""

    ok: bool
    data: Any = None
    raw: dict[str, Any]

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> RemoteEnvelope:
        return cls(ok=bool(payload.get("ok")), data=payload.get("data"), raw=payload)


def build_rpc_url(base_url: str, method: str) -> str:
    """Build the remote URL for a method.

    The method name is appended as a raw query string, unencoded, which is
    what the remote service expects from existing clients.
    """
    return f"{base_url.rstrip('/')}{INTERNAL_API_PATH}?{method}"


def build_rpc_body(method: str, params: Mapping[str, Any]) -> bytes:
    """Serialize the ``{method, params}`` request body."""
    return json.dumps({"method": method, "params": dict(params)}).encode("utf-8")


def build_headers(token: str, body: bytes) -> dict[str, str]:
    """Build the outbound request headers."""
    return {
        "Content-Type": "application/json",
        "Content-Length": str(len(body)),
        "Authorization": f"Bearer {token}",
        **CLIENT_HEADERS,
    }


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def loads_json(text: str | bytes) -> Any:
    """Parse strict JSON. ``NaN``, ``Infinity`` and ``-Infinity`` are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


def parse_envelope(text: str, method: str | None = None) -> RemoteEnvelope:
    """Parse and unwrap a remote response body.

    Raises:
        InvalidResponseError: If the body is not a JSON object.
        RemoteError: If the envelope reports failure.
    """
    try:
        payload = loads_json(text)
    except ValueError as e:
        raise InvalidResponseError(str(e)) from e

    if not isinstance(payload, dict):
        raise InvalidResponseError(f"Expected a JSON object, got {type(payload).__name__}")

    if not payload.get("ok"):
        error = payload.get("error")
        message = error.get("message") if isinstance(error, dict) else None
        if not isinstance(message, str) or not message:
            message = None
        raise RemoteError(message, method=method)

    return RemoteEnvelope.from_payload(payload)


class RemoteClient:
    """Issues RPC calls to the remote task API."""

    def __init__(
        self,
        credentials: CredentialResolver,
        base_url: str = f"https://{DEFAULT_API_HOST}",
        timeout: float | None = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            credentials: Resolver consulted before every call.
            base_url: Scheme and host of the remote API.
            timeout: Seconds to wait for the remote, or None for no timeout.
            transport: Optional httpx transport, used by tests to stub the remote.
        """
        self.credentials = credentials
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(
        cls,
        config: GatewayConfig,
        credentials: CredentialResolver | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RemoteClient:
        """Create a client from gateway settings."""
        return cls(
            credentials=credentials or CredentialResolver.from_config(config),
            base_url=config.api_base_url,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def call(self, method: str, params: Mapping[str, Any] | None = None) -> RemoteEnvelope:
        """Call a remote method.

        Args:
            method: Remote method name, e.g. ``listTasks``.
            params: Method parameters. Must already be stripped of absent fields.

        Returns:
            The successful envelope.

        Raises:
            NoCredentialError: If no token is available. No request is made.
            TransportError: If the remote cannot be reached.
            RemoteTimeoutError: If the remote does not answer in time.
            InvalidResponseError: If the response is not a JSON object.
            RemoteError: If the envelope reports ``ok: false``.
        """
        token = self.credentials.resolve()
        body = build_rpc_body(method, params or {})
        url = build_rpc_url(self.base_url, method)

        logger.debug(f"Calling remote method {method}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, content=body, headers=build_headers(token, body))
        except httpx.TimeoutException as e:
            raise RemoteTimeoutError(url, self.timeout or 0.0, e) from e
        except httpx.HTTPError as e:
            raise TransportError(url, e) from e

        logger.debug(f"Remote method {method} answered HTTP {response.status_code}")
        return parse_envelope(response.text, method=method)
