"""Tests for CLI commands: help, config, serve, due, delay and pacing."""

import json
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from revhub.application.srs.service import BulkUpdateResult
from revhub.domain.errors import ValidationError
from revhub.domain.srs.models import DueQuestion
from revhub.interface.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("REVHUB_PORT", raising=False)
    monkeypatch.delenv("REVHUB_HOST", raising=False)


@pytest.fixture
def services():
    mock = MagicMock()
    mock.srs.get_due_questions = AsyncMock(return_value=[])
    mock.srs.delay_all_reviews = AsyncMock(return_value=BulkUpdateResult(4, 2))
    mock.srs.update_pacing = AsyncMock(return_value=BulkUpdateResult(3, 1))
    with patch("revhub.application.factory.build_services", return_value=mock) as build:
        mock.build = build
        yield mock


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "serve" in result.stdout
    assert "due" in result.stdout
    assert "config" in result.stdout


# --- Config ---


@patch("revhub.interface.cli.resolve_config")
def test_config_show_command(mock_resolve_config):
    mock_config = MagicMock()
    mock_config.model_dump.return_value = {"backend": "memory", "batch_size": 100}
    mock_resolve_config.return_value = mock_config

    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"backend": "memory", "batch_size": 100}


# --- Server ---


@patch("uvicorn.run")
def test_serve_command(mock_run):
    result = runner.invoke(app, ["serve", "--port", "9000"])
    assert result.exit_code == 0
    mock_run.assert_called_with("revhub.server:app", host="127.0.0.1", port=9000, reload=False)


@patch("uvicorn.run")
def test_serve_uses_configured_port(mock_run):
    result = runner.invoke(app, ["serve"])
    assert result.exit_code == 0
    mock_run.assert_called_with("revhub.server:app", host="127.0.0.1", port=8792, reload=False)


# --- Scheduling commands ---


def test_due_lists_questions(services):
    services.srs.get_due_questions.return_value = [
        DueQuestion("bm_1", "q1", False),
        DueQuestion("bm_2", "q2", True),
    ]

    result = runner.invoke(app, ["due", "user-1", "--backend", "memory"])

    assert result.exit_code == 0
    assert "q1  [bm_1]" in result.stdout
    assert "q2  [bm_2] (custom reminder)" in result.stdout
    assert "Due: 2" in result.stdout
    config = services.build.call_args[0][0]
    assert config.backend == "memory"
    services.srs.get_due_questions.assert_awaited_once_with("user-1")


def test_due_nothing(services):
    result = runner.invoke(app, ["due", "user-1"])
    assert result.exit_code == 0
    assert "Nothing due." in result.stdout


def test_today_override(services):
    result = runner.invoke(app, ["due", "user-1", "--today", "2024-03-10"])

    assert result.exit_code == 0
    clock = services.build.call_args.kwargs["clock"]
    assert clock.today() == date(2024, 3, 10)


def test_today_override_rejects_bad_date(services):
    result = runner.invoke(app, ["due", "user-1", "--today", "soon"])
    assert result.exit_code == 2


def test_delay_command(services):
    result = runner.invoke(app, ["delay", "user-1", "--", "-2"])

    assert result.exit_code == 0
    assert "Shifted 4 bookmarks." in result.stdout
    assert "Now due: 2" in result.stdout
    services.srs.delay_all_reviews.assert_awaited_once_with("user-1", -2)


def test_delay_validation_error(services):
    services.srs.delay_all_reviews.side_effect = ValidationError("Delay days must be non-zero")

    result = runner.invoke(app, ["delay", "user-1", "0"])

    assert result.exit_code == 1
    assert "Delay days must be non-zero" in result.output


def test_pacing_command(services):
    result = runner.invoke(app, ["pacing", "user-1", "0.5"])

    assert result.exit_code == 0
    assert "Rescheduled 3 bookmarks." in result.stdout
    assert "Newly due: 1" in result.stdout
    services.srs.update_pacing.assert_awaited_once_with("user-1", 0.5)
