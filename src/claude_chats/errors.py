"""Exception types raised by the scanner and the deletion planner."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from claude_chats.models import ConversationEntry


class ChatsError(Exception):
    """Base class for claude-chats errors."""


class ScanError(ChatsError):
    """The storage root is missing or cannot be listed. Aborts the session."""

    def __init__(self, root: Path, reason: str) -> None:
        super().__init__(f"Cannot read Claude projects directory {root}: {reason}")
        self.root = root
        self.reason = reason


class ActiveConversationError(ChatsError):
    """Deletion was requested for recently active conversations without acknowledgement."""

    def __init__(self, entries: list[ConversationEntry]) -> None:
        ids = ", ".join(e.id for e in entries)
        super().__init__(f"Refusing to delete {len(entries)} active conversation(s): {ids}")
        self.entries = entries
