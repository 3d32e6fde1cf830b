"""Headless tests driving the Textual app through a pilot."""

import asyncio
from datetime import timedelta

from conftest import NOW, make_entry

from claude_chats.app import ClaudeChats
from claude_chats.controller import Mode
from claude_chats.models import DeletionOutcome, DeletionReport, ScanResult
from claude_chats.widgets.conversation_view import ConversationView


class Catalog:
    """Scan stand-in: every call returns the current entries."""

    def __init__(self, entries):
        self.entries = list(entries)
        self.scans = 0

    def scan(self):
        self.scans += 1
        return ScanResult(list(self.entries))

    def delete(self, entries, active_confirmed):
        keys = {e.key for e in entries}
        self.entries = [e for e in self.entries if e.key not in keys]
        return DeletionReport([DeletionOutcome(entry=e, deleted=[e.path]) for e in entries])


def make_app(catalog):
    return ClaudeChats(catalog.scan, catalog.delete, clock=lambda: NOW)


def run(scenario):
    asyncio.run(scenario())


def test_select_and_delete_then_rescan():
    catalog = Catalog([make_entry(f"s{i}", minutes_ago=60 + i) for i in range(5)])

    async def scenario():
        app = make_app(catalog)
        async with app.run_test(size=(120, 30)) as pilot:
            await pilot.press("j", "space", "enter")
            assert app.list_mode is Mode.AWAITING_CONFIRMATION
            await pilot.press("enter")
            assert app.list_mode is Mode.DONE
            view = app.query_one(ConversationView)
            assert any("OK Deleted 1 files" in line for line in view.shown.lines)

            await pilot.press("r")
            assert app.list_mode is Mode.BROWSING
            assert [e.id for e in app.controller.entries] == ["s0", "s2", "s3", "s4"]
            assert app.controller.selection == set()
            await pilot.press("q")

    run(scenario)
    assert catalog.scans == 2


def test_escape_cancels_confirmation():
    catalog = Catalog([make_entry("s0"), make_entry("s1", minutes_ago=90)])

    async def scenario():
        app = make_app(catalog)
        async with app.run_test(size=(120, 30)) as pilot:
            await pilot.press("a", "enter", "escape")
            assert app.list_mode is Mode.BROWSING
            assert len(app.controller.selection) == 2
            await pilot.press("q")

    run(scenario)
    assert len(catalog.entries) == 2


def test_active_entries_need_y():
    catalog = Catalog([make_entry("live", minutes_ago=2)])

    async def scenario():
        app = make_app(catalog)
        async with app.run_test(size=(120, 30)) as pilot:
            await pilot.press("space", "enter")
            assert app.list_mode is Mode.ACKNOWLEDGE_ACTIVE
            await pilot.press("enter")
            assert app.list_mode is Mode.ACKNOWLEDGE_ACTIVE
            await pilot.press("y", "enter")
            assert app.list_mode is Mode.DONE
            await pilot.press("q")

    run(scenario)
    assert catalog.entries == []


def test_active_marker_follows_the_clock():
    catalog = Catalog([make_entry("was-live", minutes_ago=4)])
    times = [NOW]

    async def scenario():
        app = ClaudeChats(catalog.scan, catalog.delete, clock=lambda: times[-1])
        async with app.run_test(size=(120, 30)) as pilot:
            assert app.controller.is_active(catalog.entries[0])
            times.append(NOW + timedelta(minutes=10))
            await pilot.press("space", "enter")
            assert app.list_mode is Mode.AWAITING_CONFIRMATION
            await pilot.press("q", "q")

    run(scenario)
    assert len(catalog.entries) == 1


def test_viewport_tracks_terminal_height():
    catalog = Catalog([make_entry(f"s{i}", minutes_ago=60 + i) for i in range(50)])

    async def scenario():
        app = make_app(catalog)
        async with app.run_test(size=(120, 20)) as pilot:
            assert app.controller.viewport_height == 12
            await pilot.press("pagedown")
            assert app.controller.cursor == 12
            assert app.controller.scroll_offset == 1
            await pilot.press("q")

    run(scenario)
