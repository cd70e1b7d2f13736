"""Fixtures for CLI tests."""

import json

import pytest
from typer.testing import CliRunner

from amp_task_gateway.core.config import ENV_VAR_MAP


@pytest.fixture
def cli_runner():
    """Provide a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_env(monkeypatch, secrets_path):
    """Point the CLI at the temp secrets file and clear gateway variables."""
    for env_var in ENV_VAR_MAP.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.delenv("AMP_API_KEY", raising=False)
    monkeypatch.setenv("AMP_SECRETS_PATH", str(secrets_path))

    def _with_secrets(data):
        secrets_path.write_text(json.dumps(data))
        return secrets_path

    return _with_secrets
