"""Textual application hosting the conversation selection list.

Every key press maps to exactly one ListController transition, after
which the whole view is re-rendered from controller state.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.theme import Theme

from claude_chats.controller import (
    APP_TITLE,
    Deleter,
    ListController,
    Mode,
    render,
    viewport_height_for,
)
from claude_chats.deletion import utcnow
from claude_chats.errors import ScanError
from claude_chats.models import DEFAULT_ACTIVE_WINDOW, DeletionReport, ScanResult
from claude_chats.widgets.conversation_view import ConversationView

THEME = Theme(
    name="one-dark",
    primary="#61afef",
    secondary="#c678dd",
    warning="#d4b85c",
    error="#c97070",
    success="#7dba6d",
    accent="#61afef",
    foreground="#abb2bf",
    background="#282c34",
    surface="#282c34",
    panel="#2f333b",
    dark=True,
)


class ClaudeChats(App):
    TITLE = APP_TITLE

    BINDINGS = [
        Binding("j,down", "move(1)", "Down", show=False),
        Binding("k,up", "move(-1)", "Up", show=False),
        Binding("pagedown", "page(1)", "Page down", show=False),
        Binding("pageup", "page(-1)", "Page up", show=False),
        Binding("space", "toggle", "Select"),
        Binding("a", "select_all", "All"),
        Binding("n", "none", "None"),
        Binding("enter", "confirm", "Delete"),
        Binding("y", "acknowledge", "Yes", show=False),
        Binding("escape", "back", "Back", show=False, priority=True),
        Binding("r", "rescan", "Rescan", show=False),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        scan: Callable[[], ScanResult],
        deleter: Deleter,
        *,
        initial: ScanResult | None = None,
        active_window: timedelta = DEFAULT_ACTIVE_WINDOW,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__()
        self.register_theme(THEME)
        self.theme = "one-dark"
        self._scan_catalog = scan
        self._delete_entries = deleter
        self._active_span = active_window
        self._now = clock
        self._initial_result = initial
        self.controller: ListController | None = None
        self.reports: list[DeletionReport] = []
        self.fatal: ScanError | None = None

    def compose(self) -> ComposeResult:
        yield ConversationView(id="conversations")

    def on_mount(self) -> None:
        result = self._initial_result if self._initial_result is not None else self._scan_catalog()
        self._start(result)

    def _start(self, result: ScanResult) -> None:
        """Fresh Browsing state over a newly scanned catalog."""
        self.controller = ListController(
            result.entries,
            self._delete_entries,
            viewport_height=viewport_height_for(self.size.height),
            now=self._now(),
            active_window=self._active_span,
            warning_count=len(result.warnings),
            clock=self._now,
        )
        self._redraw()

    def _redraw(self) -> None:
        if self.controller is None:
            return
        if self.controller.mode is Mode.BROWSING:
            self.controller.refresh_clock()
        self.query_one("#conversations", ConversationView).show(render(self.controller))

    def on_resize(self, event: events.Resize) -> None:
        if self.controller is not None:
            self.controller.resize(viewport_height_for(event.size.height))
            self._redraw()

    @property
    def list_mode(self) -> Mode | None:
        return self.controller.mode if self.controller else None

    def action_move(self, delta: int) -> None:
        self.controller.move(delta)
        self._redraw()

    def action_page(self, direction: int) -> None:
        if direction > 0:
            self.controller.page_down()
        else:
            self.controller.page_up()
        self._redraw()

    def action_toggle(self) -> None:
        self.controller.toggle()
        self._redraw()

    def action_select_all(self) -> None:
        self.controller.select_all()
        self._redraw()

    def action_none(self) -> None:
        if self.list_mode is Mode.BROWSING:
            self.controller.deselect_all()
        else:
            self._decline()
        self._redraw()

    def action_confirm(self) -> None:
        c = self.controller
        if c.mode is Mode.BROWSING:
            c.confirm()
        elif c.mode is Mode.AWAITING_CONFIRMATION:
            c.answer(True)
            if c.report is not None:
                self.reports.append(c.report)
        elif c.mode is Mode.DONE:
            self.action_rescan()
            return
        self._redraw()

    def action_acknowledge(self) -> None:
        self.controller.acknowledge_active(True)
        self._redraw()

    def _decline(self) -> None:
        c = self.controller
        if c.mode is Mode.ACKNOWLEDGE_ACTIVE:
            c.acknowledge_active(False)
        elif c.mode is Mode.AWAITING_CONFIRMATION:
            c.answer(False)

    def action_back(self) -> None:
        if self.list_mode is Mode.BROWSING:
            self.controller.quit()
            self.exit()
            return
        if self.list_mode is Mode.DONE:
            self.exit()
            return
        self._decline()
        self._redraw()

    def action_rescan(self) -> None:
        if self.list_mode is not Mode.DONE:
            return
        try:
            result = self._scan_catalog()
        except ScanError as e:
            self.fatal = e
            self.exit()
            return
        self._start(result)

    async def action_quit(self) -> None:
        if self.list_mode in (Mode.ACKNOWLEDGE_ACTIVE, Mode.AWAITING_CONFIRMATION):
            self._decline()
            self._redraw()
            return
        if self.list_mode is Mode.BROWSING:
            self.controller.quit()
        self.exit()
