"""Shared pytest fixtures for the gateway test suite.

The remote Amp API is never contacted: every test that needs it gets a
``RemoteRecorder``, an ``httpx.MockTransport`` that records outbound requests
and answers with a configurable envelope.
"""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from amp_task_gateway.api.server import create_app
from amp_task_gateway.core.config import GatewayConfig
from amp_task_gateway.core.credentials import SERVICE_KEY, CredentialResolver

TEST_TOKEN = "test-api-key"

# =============================================================================
# Remote API Double
# =============================================================================


class RemoteRecorder:
    """Records requests sent to the remote API and replays a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.content: bytes = json.dumps({"ok": True, "data": []}).encode()
        self.error: Exception | None = None

    def respond(self, body: Any = None, status_code: int = 200, text: str | None = None) -> None:
        """Set the next responses to a JSON body, or to raw text."""
        self.status_code = status_code
        self.content = (text if text is not None else json.dumps(body)).encode()
        self.error = None

    def fail(self, error: Exception) -> None:
        """Make the next requests raise ``error``."""
        self.error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            content=self.content,
            headers={"Content-Type": "application/json"},
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no request reached the remote"
        return self.requests[-1]

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.last_request.content)


# =============================================================================
# Filesystem Fixtures
# =============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def secrets_path(temp_dir) -> Path:
    """Location of the Amp secrets file inside the temp directory (not created)."""
    path = temp_dir / ".local" / "share" / "amp" / "secrets.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def write_secrets(secrets_path):
    """Write a dict (or raw text) to the secrets file."""

    def _write(data: dict[str, Any] | str) -> Path:
        text = data if isinstance(data, str) else json.dumps(data)
        secrets_path.write_text(text)
        return secrets_path

    return _write


@pytest.fixture
def static_dir(temp_dir) -> Path:
    """A static root with an index page and a few assets."""
    root = temp_dir / "static"
    root.mkdir()
    (root / "index.html").write_text("<h1>Amp Tasks</h1>")
    (root / "app.js").write_text("console.log('hi');")
    (root / "README.md").write_text("# Notes")
    (root / "data.bin").write_bytes(b"\x00\x01")
    (root / "assets").mkdir()
    (root / "assets" / "logo.svg").write_text("<svg/>")
    return root


# =============================================================================
# Gateway Fixtures
# =============================================================================


@pytest.fixture
def remote() -> RemoteRecorder:
    """A recording stand-in for the remote API."""
    return RemoteRecorder()


@pytest.fixture
def credentials(write_secrets, secrets_path) -> CredentialResolver:
    """A resolver backed by a secrets file holding ``TEST_TOKEN``."""
    write_secrets({SERVICE_KEY: TEST_TOKEN})
    return CredentialResolver(secrets_path=secrets_path, environ={})


@pytest.fixture
def gateway_config(secrets_path, static_dir) -> GatewayConfig:
    return GatewayConfig(
        api_host="amp.test",
        secrets_path=secrets_path,
        static_dir=static_dir,
        request_timeout=5.0,
    )


@pytest.fixture
def api_client(gateway_config, credentials, remote) -> TestClient:
    """A TestClient for the gateway wired to the recording remote."""
    app = create_app(gateway_config, credentials=credentials, transport=remote.transport)
    return TestClient(app)


@pytest.fixture
def api_token() -> str:
    """The bearer token the ``credentials`` fixture resolves to."""
    return TEST_TOKEN
