"""Tests for the Typer command line."""

from datetime import datetime, timezone

from conftest import WORKSPACE, write_chat, write_empty
from typer.testing import CliRunner

from claude_chats import cli

runner = CliRunner()


def isolate_settings(monkeypatch, tmp_path):
    monkeypatch.setattr("claude_chats.settings.SETTINGS_PATH", tmp_path / "no-settings.json")


def test_list_workspaces(projects_dir, workspace_dir, monkeypatch, tmp_path):
    isolate_settings(monkeypatch, tmp_path)
    write_chat(workspace_dir, "s1", "Hello", datetime.now(timezone.utc))
    result = runner.invoke(cli.app, ["--projects-dir", str(projects_dir), "--list-workspaces"])
    assert result.exit_code == 0
    assert "/home/wiz/projects/myapp" in result.output
    assert WORKSPACE in result.output


def test_delete_empty_confirms(projects_dir, workspace_dir, monkeypatch, tmp_path):
    isolate_settings(monkeypatch, tmp_path)
    empty = write_empty(workspace_dir, "e1", datetime(2024, 1, 1, tzinfo=timezone.utc))
    result = runner.invoke(cli.app, ["--projects-dir", str(projects_dir), "--delete-empty"], input="y\n")
    assert result.exit_code == 0
    assert not empty.exists()


def test_missing_root_fails(tmp_path, monkeypatch):
    isolate_settings(monkeypatch, tmp_path)
    result = runner.invoke(cli.app, ["--projects-dir", str(tmp_path / "missing")])
    assert result.exit_code == 1
