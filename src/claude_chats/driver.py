"""Session driver: scan, show, confirm, delete, re-scan.

Three ways in, picked from the parsed command line:

- ``list_workspaces``: print workspaces with chat/agent counts
- ``delete_empty`` / ``delete_warmup``: list the matching entries, ask
  once (twice if any are active), delete, report
- otherwise: the interactive Textual list
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import typer
from rich.console import Console
from rich.markup import escape

from claude_chats.app import ClaudeChats
from claude_chats.controller import APP_TITLE, report_lines
from claude_chats.deletion import delete_entries, find_active, utcnow
from claude_chats.errors import ScanError
from claude_chats.models import ConversationEntry, ConversationKind, DeletionReport, ScanConfig, ScanResult
from claude_chats.scanner import list_workspaces, scan_conversations
from claude_chats.settings import Settings

Confirm = Callable[[str], bool]


@dataclass
class RunOptions:
    workspace: str | None = None
    empty_only: bool = False
    delete_empty: bool = False
    delete_warmup: bool = False
    list_workspaces: bool = False
    include_agents: bool = False


def _ask(prompt: str) -> bool:
    return typer.confirm(prompt, default=False)


class SessionDriver:
    def __init__(
        self,
        options: RunOptions,
        settings: Settings,
        *,
        console: Console | None = None,
        confirm: Confirm = _ask,
        clock: Callable[[], datetime] = utcnow,
        app_factory: Callable[..., ClaudeChats] = ClaudeChats,
    ) -> None:
        self.options = options
        self.settings = settings
        self.console = console or Console()
        self._confirm = confirm
        self._clock = clock
        self._app_factory = app_factory

    def run(self) -> int:
        """Run the selected mode and return the process exit status."""
        try:
            if self.options.list_workspaces:
                return self._list_workspaces()
            if self.options.delete_empty or self.options.delete_warmup:
                return self._batch_delete()
            return self._interactive()
        except ScanError as e:
            self.console.print(f"[red bold]Error:[/] {escape(str(e))}")
            return 1

    # -- scanning --

    def scan(self, include_agents: bool) -> ScanResult:
        config = ScanConfig(
            include_agents=include_agents,
            workspace_filter=self.options.workspace,
            excluded_workspaces=self.settings.excluded_workspaces,
        )
        result = scan_conversations(self.settings.projects_dir, config)
        if self.options.empty_only:
            result.entries = [e for e in result.entries if e.kind is ConversationKind.EMPTY]
        return result

    def delete(self, entries: list[ConversationEntry], active_confirmed: bool) -> DeletionReport:
        return delete_entries(
            entries,
            active_confirmed=active_confirmed,
            now=self._clock(),
            window=self.settings.active_window,
        )

    def _print_warnings(self, result: ScanResult) -> None:
        if result.warnings:
            self.console.print(f"[#d4b85c]{len(result.warnings)} unreadable file(s) skipped[/]")

    def _print_report(self, report: DeletionReport) -> None:
        for line in report_lines(report):
            failed = line.startswith(("  ERR", "      ", "WARN"))
            self.console.print(line, style="#c97070" if failed else None, markup=False, highlight=False)

    # -- modes --

    def _list_workspaces(self) -> int:
        self.console.print(f"\n[bold cyan]{APP_TITLE}[/]\n")
        self.console.print("[bold cyan]Available workspaces:[/]\n")
        for summary in list_workspaces(self.settings.projects_dir):
            ws = summary.workspace
            self.console.print(
                f"  [green]->[/] {escape(ws.decoded)} "
                f"([#d4b85c]{summary.chats}[/] chats, [dim]{summary.agents}[/] agents)"
            )
            self.console.print(f"     [dim]-w {escape(ws.encoded)}[/]")
        return 0

    def _batch_delete(self) -> int:
        self.console.print(f"\n[bold cyan]{APP_TITLE}[/]\n")
        result = self.scan(include_agents=True)
        self._print_warnings(result)

        wanted = set()
        if self.options.delete_empty:
            wanted.add(ConversationKind.EMPTY)
        if self.options.delete_warmup:
            wanted.add(ConversationKind.WARMUP)
        targets = [e for e in result.entries if e.kind in wanted]
        skipped = len(result.entries) - len(targets)

        if not targets:
            self.console.print(f"[#d4b85c]No matching conversations found.[/] ({skipped} skipped)")
            return 0

        empty = sum(1 for e in targets if e.kind is ConversationKind.EMPTY)
        self.console.print(
            f"Found [red]{len(targets)}[/] conversations to delete "
            f"({empty} empty, {len(targets) - empty} warmup), {skipped} skipped:\n"
        )
        for entry in targets:
            self.console.print(
                f"  - [dim]{escape(entry.display_title)} {escape(entry.id)}[/] ({escape(entry.workspace.name)})"
            )
        self.console.print()

        if not self._confirm(f"Delete {len(targets)} conversations?"):
            self.console.print("[#d4b85c]Cancelled.[/]")
            return 0

        active = find_active(targets, self._clock(), self.settings.active_window)
        if active:
            self.console.print(
                f"[red bold]WARNING: {len(active)} conversation(s) may be currently in use![/]"
            )
            if not self._confirm("Delete active conversations anyway?"):
                self.console.print("[#d4b85c]Cancelled.[/]")
                return 0

        report = self.delete(targets, bool(active))
        self._print_report(report)
        return 0

    def _interactive(self) -> int:
        result = self.scan(self.options.include_agents)
        if not result.entries:
            self._print_warnings(result)
            self.console.print("[#d4b85c]No conversations found.[/]")
            return 0

        app = self._app_factory(
            scan=lambda: self.scan(self.options.include_agents),
            deleter=self.delete,
            initial=result,
            active_window=self.settings.active_window,
            clock=self._clock,
        )
        app.run()
        if app.fatal is not None:
            raise app.fatal
        for report in app.reports:
            if report.failures:
                self._print_report(report)
        return 0
