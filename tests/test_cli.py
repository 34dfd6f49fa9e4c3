"""CLI tests — uvicorn is patched out, nothing listens."""

import pytest
from click.testing import CliRunner

from realtime_relay import cli as cli_module
from realtime_relay.config import Settings


@pytest.fixture()
def runner():
    return CliRunner()


@pytest.fixture()
def served(monkeypatch):
    calls = []
    monkeypatch.setattr(cli_module.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    monkeypatch.setattr(cli_module, "configure_logging", lambda *a, **kw: None)
    return calls


def test_serve_runs_uvicorn_with_overrides(runner, served, monkeypatch):
    monkeypatch.setattr(cli_module, "settings", Settings(api_key="sk-test"))

    result = runner.invoke(cli_module.cli, ["serve", "--port", "9001", "--host", "127.0.0.1"])

    assert result.exit_code == 0, result.output
    app, kwargs = served[0]
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9001
    assert app.state.proxy_service.config.credential == "sk-test"


def test_serve_without_key_exits_with_error(runner, served, monkeypatch):
    monkeypatch.setattr(cli_module, "settings", Settings(api_key=""))

    result = runner.invoke(cli_module.cli, ["serve"])

    assert result.exit_code == 1
    assert "API key" in result.output
    assert served == []


def test_config_masks_key(runner, monkeypatch):
    monkeypatch.setattr(cli_module, "settings", Settings(api_key="sk-very-secret"))

    result = runner.invoke(cli_module.cli, ["config"])

    assert result.exit_code == 0
    assert "sk-very-secret" not in result.output
    assert "api key" in result.output
