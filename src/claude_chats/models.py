from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path

from claude_chats.paths import decode_path, short_name

DEFAULT_ACTIVE_WINDOW = timedelta(minutes=5)


class ConversationKind(Enum):
    NORMAL = "normal"
    EMPTY = "empty"
    WARMUP = "warmup"
    AGENT = "agent"


@dataclass(frozen=True, order=True)
class WorkspacePath:
    encoded: str

    @property
    def decoded(self) -> str:
        return decode_path(self.encoded)

    @property
    def name(self) -> str:
        return short_name(self.decoded)


# (workspace encoded name, session id): the catalog's primary key
EntryKey = tuple[str, str]


@dataclass(frozen=True)
class ConversationEntry:
    id: str
    workspace: WorkspacePath
    kind: ConversationKind
    path: Path
    size_bytes: int
    last_active: datetime   # timestamp of the last parseable line, mtime fallback
    title: str | None = None
    related_folder: Path | None = None
    legacy_agent_refs: frozenset[Path] = frozenset()
    legacy_agent_folders: frozenset[Path] = frozenset()   # <workspace>/agent-*/ of linked agents

    @property
    def key(self) -> EntryKey:
        return (self.workspace.encoded, self.id)

    @property
    def display_title(self) -> str:
        if self.kind is ConversationKind.EMPTY:
            return "[Empty]"
        if self.kind is ConversationKind.WARMUP:
            return "[Warmup]"
        return self.title or "[No title]"

    def is_active(self, now: datetime, window: timedelta = DEFAULT_ACTIVE_WINDOW) -> bool:
        """True when the last line was written within `window` of `now`."""
        return now - self.last_active < window


@dataclass
class ScanConfig:
    include_agents: bool = False
    workspace_filter: str | None = None
    excluded_workspaces: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ScanWarning:
    path: Path
    reason: str


@dataclass
class ScanResult:
    entries: list[ConversationEntry]
    warnings: list[ScanWarning] = field(default_factory=list)


@dataclass
class WorkspaceSummary:
    workspace: WorkspacePath
    chats: int
    agents: int


@dataclass
class DeletionOutcome:
    entry: ConversationEntry
    deleted: list[Path] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)
    already_gone: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class DeletionReport:
    outcomes: list[DeletionOutcome] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return sum(len(o.deleted) + len(o.already_gone) for o in self.outcomes)

    @property
    def failures(self) -> list[tuple[Path, str]]:
        return [f for o in self.outcomes for f in o.failed]
