"""Shared fixtures: a temporary Claude projects directory and transcript writers."""

import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from claude_chats.models import ConversationEntry, ConversationKind, WorkspacePath

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

WORKSPACE = "-home-wiz-projects-myapp"


def iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def user_line(text, ts: datetime, session_id: str = "s1") -> dict:
    return {
        "type": "user",
        "sessionId": session_id,
        "timestamp": iso(ts),
        "message": {"role": "user", "content": text},
    }


def assistant_line(text: str, ts: datetime, session_id: str = "s1") -> dict:
    return {
        "type": "assistant",
        "sessionId": session_id,
        "timestamp": iso(ts),
        "message": {"role": "assistant", "content": [{"type": "text", "text": text}]},
    }


def write_jsonl(path: Path, lines: list) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for line in lines:
            f.write(line if isinstance(line, str) else json.dumps(line))
            f.write("\n")
    return path


def write_chat(directory: Path, session_id: str, title: str, ts: datetime) -> Path:
    return write_jsonl(directory / f"{session_id}.jsonl", [
        user_line(title, ts - timedelta(minutes=1), session_id),
        assistant_line("Sure.", ts, session_id),
    ])


def write_empty(directory: Path, session_id: str, mtime: datetime | None = None) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{session_id}.jsonl"
    path.touch()
    if mtime is not None:
        os.utime(path, (mtime.timestamp(), mtime.timestamp()))
    return path


def write_warmup(path: Path, ts: datetime, session_id: str = "s1") -> Path:
    return write_jsonl(path, [
        user_line("Warmup", ts - timedelta(seconds=5), session_id),
        assistant_line("Ready.", ts, session_id),
    ])


def make_entry(
    session_id: str,
    minutes_ago: float = 60,
    kind: ConversationKind = ConversationKind.NORMAL,
    workspace: str = WORKSPACE,
    title: str | None = "A chat",
    now: datetime = NOW,
) -> ConversationEntry:
    return ConversationEntry(
        id=session_id,
        workspace=WorkspacePath(workspace),
        kind=kind,
        path=Path("/nonexistent") / workspace / f"{session_id}.jsonl",
        size_bytes=0 if kind is ConversationKind.EMPTY else 100,
        last_active=now - timedelta(minutes=minutes_ago),
        title=title,
    )


@pytest.fixture
def projects_dir(tmp_path) -> Path:
    root = tmp_path / ".claude" / "projects"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def workspace_dir(projects_dir) -> Path:
    d = projects_dir / WORKSPACE
    d.mkdir()
    return d
