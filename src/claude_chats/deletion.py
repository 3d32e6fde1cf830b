"""Compute and execute the file set removed for each selected conversation.

Each entry's closure is the transcript itself, its session folder
(recursively), any legacy agent transcripts linked to it and those
agents' own folders. Removal is best-effort: a failure is recorded and
the batch carries on. A target that has already vanished counts as deleted.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

from claude_chats.errors import ActiveConversationError
from claude_chats.models import (
    DEFAULT_ACTIVE_WINDOW,
    ConversationEntry,
    DeletionOutcome,
    DeletionReport,
)

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def find_active(
    entries: list[ConversationEntry],
    now: datetime | None = None,
    window: timedelta = DEFAULT_ACTIVE_WINDOW,
) -> list[ConversationEntry]:
    """Entries whose transcript was written to within `window` of `now`."""
    now = now or utcnow()
    return [e for e in entries if e.is_active(now, window)]


def closure(entry: ConversationEntry) -> list[Path]:
    """Top-level targets for one entry: transcript, folder, legacy agents and their folders."""
    targets = [entry.path]
    if entry.related_folder is not None:
        targets.append(entry.related_folder)
    targets.extend(sorted(entry.legacy_agent_refs))
    targets.extend(sorted(entry.legacy_agent_folders))
    return targets


def _record_error(outcome: DeletionOutcome, path: Path, error: OSError) -> None:
    if isinstance(error, FileNotFoundError):
        logger.debug("Already gone: %s", path)
        outcome.already_gone.append(path)
    else:
        reason = error.strerror or str(error)
        logger.warning("Failed to delete %s: %s", path, reason)
        outcome.failed.append((path, reason))


def _remove_file(path: Path, outcome: DeletionOutcome) -> None:
    try:
        path.unlink()
    except OSError as e:
        _record_error(outcome, path, e)
    else:
        logger.debug("Deleted %s", path)
        outcome.deleted.append(path)


def _remove_tree(folder: Path, outcome: DeletionOutcome) -> None:
    """Remove a folder bottom-up, recording every file individually.

    A symlinked folder is unlinked; its target is left alone.
    """
    if folder.is_symlink():
        _remove_file(folder, outcome)
        return
    if not folder.exists():
        outcome.already_gone.append(folder)
        return

    def on_error(error: OSError) -> None:
        _record_error(outcome, Path(error.filename or folder), error)

    for dirpath, dirnames, filenames in os.walk(folder, topdown=False, onerror=on_error):
        base = Path(dirpath)
        for name in filenames:
            _remove_file(base / name, outcome)
        for name in dirnames:
            sub = base / name
            if sub.is_symlink():
                _remove_file(sub, outcome)
                continue
            try:
                sub.rmdir()
            except OSError as e:
                _record_error(outcome, sub, e)
    try:
        folder.rmdir()
    except OSError as e:
        _record_error(outcome, folder, e)


def delete_entry(entry: ConversationEntry) -> DeletionOutcome:
    outcome = DeletionOutcome(entry=entry)
    folders = {entry.related_folder, *entry.legacy_agent_folders}
    for target in closure(entry):
        if target in folders:
            _remove_tree(target, outcome)
        else:
            _remove_file(target, outcome)
    return outcome


def delete_entries(
    entries: list[ConversationEntry],
    *,
    active_confirmed: bool = False,
    now: datetime | None = None,
    window: timedelta = DEFAULT_ACTIVE_WINDOW,
) -> DeletionReport:
    """Delete every entry's closure, in the given order.

    Raises ActiveConversationError before touching the filesystem if any
    entry is active and `active_confirmed` wasn't granted for the batch.
    """
    active = find_active(entries, now, window)
    if active and not active_confirmed:
        raise ActiveConversationError(active)

    report = DeletionReport()
    for entry in entries:
        report.outcomes.append(delete_entry(entry))
    return report
