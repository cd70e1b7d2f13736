"""Tests for the non-task parts of the HTTP surface.

- GET /api/health
- OPTIONS preflight and CORS headers
- Explicit 404/405 answers for unmatched API paths
- Unexpected exceptions rendered as JSON 500
"""

import re
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from amp_task_gateway.api.server import CORS_HEADERS, create_app, run_server

# =============================================================================
# Health
# =============================================================================


def test_health(api_client, remote):
    response = api_client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", data["timestamp"])
    assert remote.requests == []


def test_health_does_not_need_credentials(api_client, secrets_path):
    secrets_path.unlink()
    assert api_client.get("/api/health").status_code == 200


# =============================================================================
# CORS / OPTIONS
# =============================================================================


@pytest.mark.parametrize("path", ["/", "/api/tasks", "/api/tasks/85", "/anything/at/all"])
def test_options_returns_204_with_cors_headers(api_client, remote, path):
    response = api_client.options(path)

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, POST, PUT, DELETE, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"
    assert remote.requests == []


def test_cors_headers_on_success(api_client):
    response = api_client.get("/api/tasks")
    for name, value in CORS_HEADERS.items():
        assert response.headers[name] == value


def test_cors_headers_on_static(api_client):
    response = api_client.get("/")
    assert response.headers["access-control-allow-origin"] == "*"


# =============================================================================
# Unmatched API Paths
# =============================================================================


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("PUT", "/api/tasks"),
        ("DELETE", "/api/tasks"),
        ("POST", "/api/tasks/85"),
        ("PATCH", "/api/tasks/85"),
        ("POST", "/api/health"),
    ],
)
def test_wrong_verb_on_known_path_is_405(api_client, remote, method, path):
    response = api_client.request(method, path)

    assert response.status_code == 405
    assert response.json() == {"ok": False, "error": "Method Not Allowed"}
    assert "GET" in response.headers["allow"]
    assert remote.requests == []


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("GET", "/api/tasks/85/comments"),
        ("GET", "/api/unknown"),
        ("POST", "/api/unknown"),
        ("DELETE", "/api/tasks/85/extra"),
    ],
)
def test_unknown_api_path_is_404(api_client, remote, method, path):
    response = api_client.request(method, path)

    assert response.status_code == 404
    assert response.json() == {"ok": False, "error": "Not Found"}
    assert remote.requests == []


def test_post_to_static_path_is_405(api_client):
    response = api_client.post("/index.html")
    assert response.status_code == 405
    assert response.json()["ok"] is False


# =============================================================================
# Unexpected Errors
# =============================================================================


class ExplodingRemote:
    async def call(self, method, params=None):
        raise RuntimeError("kaboom")


def test_unexpected_error_is_json_500(gateway_config):
    app = create_app(gateway_config, remote_client=ExplodingRemote())
    client = TestClient(app)

    response = client.get("/api/tasks")

    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "kaboom"}
    assert response.headers["access-control-allow-origin"] == "*"


def test_openapi_schema_lists_task_routes(api_client):
    schema = api_client.get("/api/openapi.json").json()
    assert "/api/tasks" in schema["paths"]
    assert "/api/tasks/{task_id}" in schema["paths"]
    assert set(schema["paths"]["/api/tasks/{task_id}"]) == {"get", "put", "delete"}


# =============================================================================
# Server Runner
# =============================================================================


def test_run_server_passes_uvicorn_level(gateway_config):
    config = gateway_config.model_copy(update={"log_level": "WARNING", "port": 9100})

    with (
        patch("amp_task_gateway.api.server.configure_logging") as mock_logging,
        patch("uvicorn.run") as mock_run,
    ):
        run_server(config)

    mock_logging.assert_called_once_with("WARNING")

    kwargs = mock_run.call_args.kwargs
    assert kwargs["log_level"] == "warning"
    assert kwargs["port"] == 9100
    assert kwargs["host"] == "127.0.0.1"
