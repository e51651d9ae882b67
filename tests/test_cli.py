"""Tests for the ``staticpool`` command line."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from staticpool.cli import app

runner = CliRunner()


@pytest.fixture
def calls(monkeypatch, tmp_path: Path):
    """Record run_server invocations instead of starting uvicorn."""
    recorded: list = []
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("STATICPOOL_CONFIG", raising=False)
    monkeypatch.setattr("staticpool.server.config._CONFIG_SEARCH_PATHS", [])
    monkeypatch.setattr("staticpool.server.main.run_server", lambda **kwargs: recorded.append(kwargs))
    return recorded


def test_positional_root_and_port(calls, tmp_path: Path):
    site = tmp_path / "site"
    site.mkdir()
    result = runner.invoke(app, [str(site), "9090"])
    assert result.exit_code == 0, result.output
    assert len(calls) == 1
    assert calls[0]["root"] == site
    assert calls[0]["port"] == 9090
    assert calls[0]["host"] is None
    assert "Starting Server" in result.output


def test_defaults_come_from_settings(calls, tmp_path: Path):
    (tmp_path / "public").mkdir()
    result = runner.invoke(app, [])
    assert result.exit_code == 0, result.output
    assert calls[0]["root"] is None
    assert calls[0]["port"] is None
    assert "8080" in result.output


def test_options_forwarded(calls, tmp_path: Path):
    result = runner.invoke(
        app,
        [str(tmp_path), "8181", "--host", "0.0.0.0", "--pool-size", "2", "--max-pending", "16", "-l", "DEBUG"],
    )
    assert result.exit_code == 0, result.output
    assert calls[0]["host"] == "0.0.0.0"
    assert calls[0]["pool_size"] == 2
    assert calls[0]["max_pending"] == 16
    assert calls[0]["log_level"] == "DEBUG"


def test_missing_root_exits_1(calls, tmp_path: Path):
    result = runner.invoke(app, [str(tmp_path / "nowhere"), "8080"])
    assert result.exit_code == 1
    assert calls == []
    assert "Root directory not found" in result.output


def test_invalid_port_rejected(calls, tmp_path: Path):
    result = runner.invoke(app, [str(tmp_path), "http"])
    assert result.exit_code != 0
    assert calls == []


def test_config_file_passed_through(calls, tmp_path: Path):
    cfg = tmp_path / "custom.yaml"
    cfg.write_text(f"server:\n  root: {tmp_path}\n")
    result = runner.invoke(app, ["--config", str(cfg)])
    assert result.exit_code == 0, result.output
    assert calls[0]["config_path"] == cfg


def test_server_error_exits_1(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("staticpool.server.config._CONFIG_SEARCH_PATHS", [])

    def _fail(**kwargs):
        raise OSError("address already in use")

    monkeypatch.setattr("staticpool.server.main.run_server", _fail)
    result = runner.invoke(app, [str(tmp_path), "8080"])
    assert result.exit_code == 1
    assert "address already in use" in result.output
