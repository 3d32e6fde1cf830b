"""Discover and classify conversation transcripts under the projects directory.

Layout handled, per workspace directory:

    <session>.jsonl                      primary conversation
    <session>/                           auxiliary folder (tool results, ...)
    <session>/subagents/agent-*.jsonl    current-format subagent transcripts
    agent-*.jsonl                        legacy-format subagent transcripts

Legacy agent file names don't carry the parent session id, so they are
linked to their parent by the ``sessionId`` recorded inside them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from claude_chats.errors import ScanError
from claude_chats.models import (
    ConversationEntry,
    ConversationKind,
    ScanConfig,
    ScanResult,
    ScanWarning,
    WorkspacePath,
    WorkspaceSummary,
)
from claude_chats.transcript import TranscriptSummary, is_warmup, summarize_transcript

logger = logging.getLogger(__name__)

TRANSCRIPT_SUFFIX = ".jsonl"
AGENT_PREFIX = "agent-"
SUBAGENTS_DIR = "subagents"


@dataclass
class FileProbe:
    """Metadata and content summary for one transcript file on disk."""

    path: Path
    size: int
    mtime: float
    summary: TranscriptSummary | None = None   # None for zero-byte files
    parent_id: str | None = None               # set for <session>/subagents/ files

    @property
    def stem(self) -> str:
        return self.path.stem


@dataclass
class WorkspaceListing:
    workspace: WorkspacePath
    directory: Path
    primaries: list[FileProbe]
    legacy_agents: list[FileProbe]
    nested_agents: list[FileProbe]
    session_dirs: set[str]


def is_agent_name(stem: str) -> bool:
    return stem.startswith(AGENT_PREFIX)


def classify(probe: FileProbe) -> ConversationKind:
    """Empty beats Warmup beats Agent beats Normal."""
    if probe.size == 0 or probe.summary is None:
        return ConversationKind.EMPTY
    if is_warmup(probe.summary):
        return ConversationKind.WARMUP
    if is_agent_name(probe.stem):
        return ConversationKind.AGENT
    return ConversationKind.NORMAL


def matches_workspace(workspace: WorkspacePath, needle: str | None) -> bool:
    if not needle:
        return True
    needle = needle.lower()
    return needle in workspace.decoded.lower() or needle in workspace.encoded.lower()


def _last_active(probe: FileProbe) -> datetime:
    if probe.summary is not None and probe.summary.last_timestamp is not None:
        return probe.summary.last_timestamp
    return datetime.fromtimestamp(probe.mtime, tz=timezone.utc)


def _entry(
    probe: FileProbe,
    workspace: WorkspacePath,
    related_folder: Path | None = None,
    legacy_agent_refs: frozenset[Path] = frozenset(),
    legacy_agent_folders: frozenset[Path] = frozenset(),
) -> ConversationEntry:
    # Subagent file names are only unique within their parent session
    entry_id = f"{probe.parent_id}/{probe.stem}" if probe.parent_id else probe.stem
    return ConversationEntry(
        id=entry_id,
        workspace=workspace,
        kind=classify(probe),
        path=probe.path,
        size_bytes=probe.size,
        last_active=_last_active(probe),
        title=probe.summary.title if probe.summary else None,
        related_folder=related_folder,
        legacy_agent_refs=legacy_agent_refs,
        legacy_agent_folders=legacy_agent_folders,
    )


def catalog_workspace(listing: WorkspaceListing) -> list[ConversationEntry]:
    """Turn one workspace listing into entries. Performs no I/O.

    Pass 1 indexes primaries by session id; pass 2 resolves each legacy
    agent file's ``sessionId`` against that index. Matched legacy files
    become the primary's ``legacy_agent_refs`` (and their ``agent-*/``
    folders its ``legacy_agent_folders``); unmatched ones are kept as
    standalone entries.
    """
    primary_ids = {p.stem for p in listing.primaries}

    refs: dict[str, set[Path]] = {}
    agent_folders: dict[str, set[Path]] = {}
    orphans: list[FileProbe] = []
    for agent in listing.legacy_agents:
        parent = agent.summary.session_id if agent.summary else None
        if parent is not None and parent != agent.stem and parent in primary_ids:
            refs.setdefault(parent, set()).add(agent.path)
            if agent.stem in listing.session_dirs:
                agent_folders.setdefault(parent, set()).add(listing.directory / agent.stem)
        else:
            orphans.append(agent)

    entries: list[ConversationEntry] = []
    for probe in listing.primaries:
        folder = None
        if probe.stem in listing.session_dirs:
            folder = listing.directory / probe.stem
        entries.append(_entry(
            probe,
            listing.workspace,
            related_folder=folder,
            legacy_agent_refs=frozenset(refs.get(probe.stem, ())),
            legacy_agent_folders=frozenset(agent_folders.get(probe.stem, ())),
        ))
    for probe in orphans + listing.nested_agents:
        entries.append(_entry(probe, listing.workspace))
    return entries


def _sort_key(entry: ConversationEntry) -> tuple:
    trailing = entry.kind in (ConversationKind.EMPTY, ConversationKind.WARMUP)
    return (trailing, -entry.last_active.timestamp(), entry.workspace.encoded, entry.id)


def sort_catalog(entries: list[ConversationEntry]) -> list[ConversationEntry]:
    """Content first, Empty/Warmup last; newest first within each group."""
    return sorted(entries, key=_sort_key)


def _probe(path: Path, parent_id: str | None = None) -> FileProbe:
    st = path.stat()
    summary = summarize_transcript(path) if st.st_size > 0 else None
    return FileProbe(path=path, size=st.st_size, mtime=st.st_mtime, summary=summary, parent_id=parent_id)


def _probe_all(paths: list[Path], warnings: list[ScanWarning], parent_id: str | None = None) -> list[FileProbe]:
    probes: list[FileProbe] = []
    for path in paths:
        try:
            probes.append(_probe(path, parent_id))
        except OSError as e:
            logger.warning("Skipping unreadable transcript %s: %s", path, e)
            warnings.append(ScanWarning(path, str(e)))
    return probes


def read_workspace(directory: Path, warnings: list[ScanWarning]) -> WorkspaceListing:
    """List and probe one workspace directory. Raises OSError if it can't be listed."""
    primary_paths: list[Path] = []
    legacy_paths: list[Path] = []
    session_dirs: set[str] = set()
    for child in sorted(directory.iterdir()):
        if child.is_symlink() and child.is_dir():
            # Linked folders point outside the workspace; never claim them
            logger.debug("Ignoring symlinked folder %s", child)
            continue
        if child.is_dir():
            session_dirs.add(child.name)
        elif child.suffix == TRANSCRIPT_SUFFIX:
            (legacy_paths if is_agent_name(child.stem) else primary_paths).append(child)

    primaries = _probe_all(primary_paths, warnings)
    legacy = _probe_all(legacy_paths, warnings)

    nested: list[FileProbe] = []
    for probe in primaries:
        if probe.stem not in session_dirs:
            continue
        subagents = directory / probe.stem / SUBAGENTS_DIR
        if not subagents.is_dir():
            continue
        try:
            agent_paths = sorted(subagents.glob(f"{AGENT_PREFIX}*{TRANSCRIPT_SUFFIX}"))
        except OSError as e:
            logger.warning("Skipping unreadable subagents folder %s: %s", subagents, e)
            warnings.append(ScanWarning(subagents, str(e)))
            continue
        nested.extend(_probe_all(agent_paths, warnings, parent_id=probe.stem))

    return WorkspaceListing(
        workspace=WorkspacePath(directory.name),
        directory=directory,
        primaries=primaries,
        legacy_agents=legacy,
        nested_agents=nested,
        session_dirs=session_dirs,
    )


def _workspace_dirs(root: Path) -> list[Path]:
    try:
        return sorted(p for p in root.iterdir() if p.is_dir())
    except OSError as e:
        raise ScanError(root, e.strerror or str(e)) from e


def scan_conversations(root: Path, config: ScanConfig | None = None) -> ScanResult:
    """Scan every workspace under `root` and return the sorted catalog.

    Raises ScanError if `root` itself can't be listed. Unreadable
    workspaces and files are skipped and reported as warnings.
    """
    config = config or ScanConfig()
    warnings: list[ScanWarning] = []
    entries: list[ConversationEntry] = []
    seen: set[tuple[str, str]] = set()

    for directory in _workspace_dirs(root):
        workspace = WorkspacePath(directory.name)
        if not matches_workspace(workspace, config.workspace_filter):
            continue
        if any(matches_workspace(workspace, x) for x in config.excluded_workspaces):
            continue
        try:
            listing = read_workspace(directory, warnings)
        except OSError as e:
            logger.warning("Skipping unreadable workspace %s: %s", directory, e)
            warnings.append(ScanWarning(directory, str(e)))
            continue

        for entry in catalog_workspace(listing):
            if entry.key in seen:
                logger.warning("Duplicate session id %s in %s, keeping the first", entry.id, directory)
                continue
            seen.add(entry.key)
            if not config.include_agents and entry.kind in (ConversationKind.AGENT, ConversationKind.WARMUP):
                continue
            entries.append(entry)

    return ScanResult(entries=sort_catalog(entries), warnings=warnings)


def list_workspaces(root: Path) -> list[WorkspaceSummary]:
    """Count primary chats and legacy agent files per workspace, by decoded path."""
    summaries: list[WorkspaceSummary] = []
    for directory in _workspace_dirs(root):
        chats = agents = 0
        try:
            for child in directory.iterdir():
                if child.suffix != TRANSCRIPT_SUFFIX or child.is_dir():
                    continue
                if is_agent_name(child.stem):
                    agents += 1
                else:
                    chats += 1
        except OSError as e:
            logger.warning("Skipping unreadable workspace %s: %s", directory, e)
            continue
        summaries.append(WorkspaceSummary(WorkspacePath(directory.name), chats, agents))
    summaries.sort(key=lambda s: s.workspace.decoded)
    return summaries
