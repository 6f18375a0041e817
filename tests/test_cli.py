"""Command line interface."""

import pytest
from typer.testing import CliRunner

import fixtures
from conftest import query_params
from markbook_client import cli

runner = CliRunner()


@pytest.fixture
def cli_client(monkeypatch, make_client):
    monkeypatch.setattr(cli, "build_client", lambda config_file: make_client())


def test_markbooks(cli_client, server):
    server.enqueue(fixtures.MARKBOOK_LIST)

    result = runner.invoke(cli.app, ["markbooks"])

    assert result.exit_code == 0
    assert "My Second Markbook" in result.stdout


def test_users(cli_client, server):
    server.enqueue(fixtures.USER_LIST)

    result = runner.invoke(cli.app, ["users"])

    assert result.exit_code == 0
    assert "jdoe" in result.stdout


def test_markbook(cli_client, server):
    server.enqueue(fixtures.GET_MARKBOOK)

    result = runner.invoke(cli.app, ["markbook", "1000001"])

    assert result.exit_code == 0
    assert "Ameche" in result.stdout
    assert query_params(server.data_requests[0])["key"] == "1000001"


def test_schedule_backup(cli_client, server):
    server.enqueue(fixtures.STATUS_OKAY)

    result = runner.invoke(cli.app, ["schedule-backup", "2024"])

    assert result.exit_code == 0
    assert query_params(server.data_requests[0])["matching"] == "2024"


def test_schedule_backup_short_filter(cli_client, server):
    result = runner.invoke(cli.app, ["schedule-backup", "x"])

    assert result.exit_code == 1
    assert "at least 2 characters" in result.stdout
    assert server.requests == []


def test_backup_url(cli_client, server):
    server.enqueue(fixtures.GET_BACKUP_URL_READY)

    result = runner.invoke(cli.app, ["backup-url"])

    assert result.exit_code == 0
    assert "school-backup" in result.stdout


def test_backup_pending(cli_client, server):
    server.enqueue(fixtures.GET_BACKUP_URL_PENDING)

    result = runner.invoke(cli.app, ["backup-url"])

    assert result.exit_code == 1
    assert "not been produced yet" in result.stdout


def test_api_error_reported(cli_client, server):
    server.enqueue_auth(fixtures.AUTHENTICATION_FAILURE)

    result = runner.invoke(cli.app, ["markbooks"])

    assert result.exit_code == 1
    assert "invalid credentials" in result.stdout


def test_missing_config_file(tmp_path):
    result = runner.invoke(cli.app, ["--config", str(tmp_path / "absent.yaml"), "markbooks"])

    assert result.exit_code == 1
    assert "not found" in result.stdout
