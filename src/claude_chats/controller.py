"""Selection list state machine and its pure renderer.

The controller knows nothing about terminals: callers feed it one input
at a time (move, toggle, confirm, ...) and redraw from ``render()``.
Selection is keyed by (workspace, session id) so it survives re-sorts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from claude_chats.models import (
    DEFAULT_ACTIVE_WINDOW,
    ConversationEntry,
    DeletionReport,
    EntryKey,
)

APP_TITLE = "Claude Code Chat Manager"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
TIME_WIDTH = 19
TITLE_WIDTH = 48
RULE_WIDTH = 100
HEADER_LINES = 6    # title, status, active notice, blank, column header, rule
FOOTER_LINES = 2    # rule, key bindings
MIN_VIEWPORT = 3
NO_CURSOR = -1

# (entries, active_confirmed) -> report
Deleter = Callable[[list[ConversationEntry], bool], DeletionReport]


class Mode(Enum):
    BROWSING = "browsing"
    ACKNOWLEDGE_ACTIVE = "acknowledge_active"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    DELETING = "deleting"
    DONE = "done"


def viewport_height_for(rows: int) -> int:
    """Rows available for table entries in a terminal `rows` tall."""
    return max(MIN_VIEWPORT, rows - HEADER_LINES - FOOTER_LINES)


class ListController:
    def __init__(
        self,
        entries: list[ConversationEntry],
        deleter: Deleter,
        *,
        viewport_height: int = 15,
        now: datetime,
        active_window: timedelta = DEFAULT_ACTIVE_WINDOW,
        warning_count: int = 0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.entries: list[ConversationEntry] = list(entries)
        self.viewport_height = max(1, viewport_height)
        self.now = now
        self.active_window = active_window
        self.warning_count = warning_count
        self.cursor = 0 if self.entries else NO_CURSOR
        self.scroll_offset = 0
        self.selection: set[EntryKey] = set()
        self.mode = Mode.BROWSING
        self.active_confirmed = False
        self.report: DeletionReport | None = None
        self._deleter = deleter
        self._clock = clock

    def refresh_clock(self) -> None:
        """Re-read `now` from the clock, if one was given."""
        if self._clock is not None:
            self.now = self._clock()

    # -- queries --

    def is_active(self, entry: ConversationEntry) -> bool:
        return entry.is_active(self.now, self.active_window)

    def is_selected(self, entry: ConversationEntry) -> bool:
        return entry.key in self.selection

    @property
    def current(self) -> ConversationEntry | None:
        if self.cursor == NO_CURSOR:
            return None
        return self.entries[self.cursor]

    @property
    def visible_range(self) -> range:
        end = min(self.scroll_offset + self.viewport_height, len(self.entries))
        return range(self.scroll_offset, end)

    def selected_entries(self) -> list[ConversationEntry]:
        """Selected entries in catalog order."""
        return [e for e in self.entries if e.key in self.selection]

    def selected_active(self) -> list[ConversationEntry]:
        return [e for e in self.selected_entries() if self.is_active(e)]

    # -- browsing transitions --

    def _follow(self) -> None:
        """Scroll the minimum needed to keep the cursor in view."""
        if self.cursor == NO_CURSOR:
            self.scroll_offset = 0
            return
        if self.cursor < self.scroll_offset:
            self.scroll_offset = self.cursor
        elif self.cursor >= self.scroll_offset + self.viewport_height:
            self.scroll_offset = self.cursor - self.viewport_height + 1
        max_offset = max(0, len(self.entries) - self.viewport_height)
        self.scroll_offset = max(0, min(self.scroll_offset, max_offset, self.cursor))

    def move(self, delta: int) -> None:
        if self.mode is not Mode.BROWSING or self.cursor == NO_CURSOR:
            return
        self.cursor = max(0, min(self.cursor + delta, len(self.entries) - 1))
        self._follow()

    def page_down(self) -> None:
        self.move(self.viewport_height)

    def page_up(self) -> None:
        self.move(-self.viewport_height)

    def resize(self, viewport_height: int) -> None:
        self.viewport_height = max(1, viewport_height)
        self._follow()

    def toggle(self) -> None:
        entry = self.current
        if self.mode is not Mode.BROWSING or entry is None:
            return
        self.selection ^= {entry.key}

    def select_all(self) -> None:
        if self.mode is Mode.BROWSING:
            self.selection = {e.key for e in self.entries}

    def deselect_all(self) -> None:
        if self.mode is Mode.BROWSING:
            self.selection = set()

    def quit(self) -> None:
        if self.mode is Mode.BROWSING:
            self.report = None
            self.mode = Mode.DONE

    def replace_entries(self, entries: list[ConversationEntry]) -> None:
        """Swap in a re-sorted or re-scanned catalog.

        Selection and cursor follow entries by key; keys that vanished are
        dropped.
        """
        current = self.current
        self.entries = list(entries)
        keys = {e.key for e in self.entries}
        self.selection &= keys
        if not self.entries:
            self.cursor = NO_CURSOR
        elif current is not None and current.key in keys:
            self.cursor = next(i for i, e in enumerate(self.entries) if e.key == current.key)
        else:
            self.cursor = max(0, min(self.cursor, len(self.entries) - 1))
        self._follow()

    # -- confirmation and deletion --

    def confirm(self) -> None:
        if self.mode is not Mode.BROWSING or not self.selection:
            return
        self.refresh_clock()
        if self.selected_active() and not self.active_confirmed:
            self.mode = Mode.ACKNOWLEDGE_ACTIVE
        else:
            self.mode = Mode.AWAITING_CONFIRMATION

    def acknowledge_active(self, accepted: bool) -> None:
        if self.mode is not Mode.ACKNOWLEDGE_ACTIVE:
            return
        if accepted:
            self.active_confirmed = True
            self.mode = Mode.AWAITING_CONFIRMATION
        else:
            self.mode = Mode.BROWSING

    def answer(self, accepted: bool) -> None:
        """Final yes/no. Yes runs the deleter synchronously and ends in DONE."""
        if self.mode is not Mode.AWAITING_CONFIRMATION:
            return
        if not accepted:
            self.active_confirmed = False
            self.mode = Mode.BROWSING
            return
        self.mode = Mode.DELETING
        self.report = self._deleter(self.selected_entries(), self.active_confirmed)
        self.mode = Mode.DONE


# -- rendering --

@dataclass
class DisplayBuffer:
    lines: list[str]
    highlight: int | None = None            # line index of the cursor row
    emphasis: set[int] = field(default_factory=set)   # line indexes of active rows


def _fit(text: str, width: int) -> str:
    return text[:width].ljust(width)


def _format_time(entry: ConversationEntry) -> str:
    return entry.last_active.astimezone().strftime(TIME_FORMAT)


def _format_row(entry: ConversationEntry, *, cursor: bool, selected: bool, active: bool) -> str:
    pointer = ">" if cursor else " "
    checkbox = "[x]" if selected else "[ ]"
    marker = "*" if active else " "
    title = _fit(marker + entry.display_title, TITLE_WIDTH)
    return f"{pointer}{checkbox} {_format_time(entry)} {title} {entry.workspace.name}"


def _column_header() -> str:
    return f"{'':4} {_fit('LAST ACTIVE', TIME_WIDTH)} {_fit('TITLE', TITLE_WIDTH)} PROJECT"


def _status_line(c: ListController) -> str:
    total = len(c.entries)
    shown = c.visible_range
    first = shown.start + 1 if total else 0
    return f"Total: {total} | Selected: {len(c.selection)} | Showing: {first}-{shown.stop}/{total}"


def _title_line(c: ListController) -> str:
    if c.warning_count:
        return f"{APP_TITLE}  ({c.warning_count} unreadable file(s) skipped)"
    return APP_TITLE


def _render_browsing(c: ListController) -> DisplayBuffer:
    active_count = sum(1 for e in c.entries if c.is_active(e))
    minutes = int(c.active_window.total_seconds() // 60)
    notice = f"  {active_count} active (written <{minutes}min ago, marked with *)" if active_count else ""
    lines = [_title_line(c), _status_line(c), notice, "", _column_header(), "-" * RULE_WIDTH]

    buf = DisplayBuffer(lines)
    for i in c.visible_range:
        entry = c.entries[i]
        active = c.is_active(entry)
        if i == c.cursor:
            buf.highlight = len(lines)
        if active:
            buf.emphasis.add(len(lines))
        lines.append(_format_row(entry, cursor=i == c.cursor, selected=c.is_selected(entry), active=active))

    lines.append("-" * RULE_WIDTH)
    if c.selection:
        lines.append(f"Delete {len(c.selection)} chat(s)? [Enter]Delete [n]None [Space]Toggle [q]Quit")
    else:
        lines.append("[j/k]Move [Space]Select [a]All [n]None [PgUp/PgDn]Page [Enter]Delete [q]Quit")
    return buf


def _render_confirmation(c: ListController) -> DisplayBuffer:
    selected = c.selected_entries()
    active = c.selected_active()
    lines = [APP_TITLE, ""]
    buf = DisplayBuffer(lines)
    if active:
        minutes = int(c.active_window.total_seconds() // 60)
        buf.emphasis.update({len(lines), len(lines) + 1})
        lines.append(f"WARNING: {len(active)} conversation(s) may be currently in use!")
        lines.append(f"(Written within the last {minutes} minutes)")
        lines.append("")
    lines.append(f"{len(selected)} conversation(s) to delete:")
    lines.append("")
    for entry in selected:
        tag = " [ACTIVE]" if c.is_active(entry) else ""
        lines.append(f"  - {entry.display_title}{tag} ({entry.workspace.decoded})")
    lines.append("")
    if c.mode is Mode.ACKNOWLEDGE_ACTIVE:
        lines.append("Press y to delete active conversations anyway (may break a running session), ESC to go back")
    else:
        lines.append("Press ENTER to confirm, ESC to cancel")
    return buf


def report_lines(report: DeletionReport) -> list[str]:
    """Per-entry results followed by every failed path and a summary."""
    lines: list[str] = []
    for outcome in report.outcomes:
        status = "OK " if outcome.ok else "ERR"
        lines.append(f"  {status} {outcome.entry.display_title} ({outcome.entry.id})")
        for path, reason in outcome.failed:
            lines.append(f"      {path} - {reason}")
    failures = report.failures
    lines.append("")
    if failures:
        lines.append(f"WARN Deleted {report.deleted_count} files ({len(failures)} failed)")
    else:
        lines.append(f"OK Deleted {report.deleted_count} files ({len(report.outcomes)} chats + related files)")
    return lines


def _render_done(c: ListController) -> DisplayBuffer:
    if c.report is None:
        return DisplayBuffer([APP_TITLE, "", "Cancelled."])
    lines = [APP_TITLE, ""] + report_lines(c.report)
    buf = DisplayBuffer(lines)
    buf.emphasis = {i for i, line in enumerate(lines) if line.startswith(("  ERR", "      ", "WARN"))}
    lines.extend(["", "[r]Rescan [q]Quit"])
    return buf


def render(c: ListController) -> DisplayBuffer:
    if c.mode is Mode.BROWSING:
        return _render_browsing(c)
    if c.mode in (Mode.ACKNOWLEDGE_ACTIVE, Mode.AWAITING_CONFIRMATION):
        return _render_confirmation(c)
    if c.mode is Mode.DELETING:
        return DisplayBuffer([APP_TITLE, "", f"Deleting {len(c.selection)} conversation(s)..."])
    return _render_done(c)
