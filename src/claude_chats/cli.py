"""Command-line entry point for claude-chats."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from claude_chats.driver import RunOptions, SessionDriver
from claude_chats.settings import Settings

app = typer.Typer(
    name="claude-chats",
    help="Manage and clean Claude Code conversation history",
    add_completion=False,
)


@app.command()
def run(
    workspace: str | None = typer.Option(None, "--workspace", "-w", help="Filter by workspace (e.g., myproject)"),
    empty_only: bool = typer.Option(False, "--empty-only", "-e", help="Only show empty conversations"),
    delete_empty: bool = typer.Option(False, "--delete-empty", help="Delete all empty (0-byte) conversations"),
    delete_warmup: bool = typer.Option(False, "--delete-warmup", help="Also delete warmup agent files (use with caution)"),
    list_workspaces: bool = typer.Option(False, "--list-workspaces", "-l", help="List all workspaces"),
    include_agents: bool = typer.Option(False, "--include-agents", help="Include warmup/subagent conversations"),
    projects_dir: Path | None = typer.Option(None, "--projects-dir", help="Claude projects directory"),
    active_minutes: float | None = typer.Option(
        None, "--active-minutes", help="Treat chats written within this many minutes as in use"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Browse conversations and delete the ones you select."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = Settings.load()
    if projects_dir is not None:
        settings.projects_dir = projects_dir.expanduser()
    if active_minutes is not None:
        settings.active_window_minutes = active_minutes

    options = RunOptions(
        workspace=workspace,
        empty_only=empty_only,
        delete_empty=delete_empty,
        delete_warmup=delete_warmup,
        list_workspaces=list_workspaces,
        include_agents=include_agents,
    )
    code = SessionDriver(options, settings).run()
    raise typer.Exit(code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
