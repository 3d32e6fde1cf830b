"""Encode and decode workspace paths <-> project directory names.

Claude Code stores each workspace under a directory named after its
absolute path with every ``/`` replaced by ``-``:

    /Users/desmond/claude-tui -> -Users-desmond-claude-tui

A literal ``-`` in a path segment is indistinguishable from a separator,
so decoding is for display only. Never build a filesystem path from it.
"""

from __future__ import annotations

import os
from pathlib import Path


def encode_path(path: str) -> str:
    """/home/wiz/AI/LLM -> -home-wiz-AI-LLM"""
    return path.replace("/", "-")


def decode_path(encoded: str) -> str:
    """-home-wiz-AI-LLM -> /home/wiz/AI/LLM"""
    return encoded.replace("-", "/")


def short_name(decoded: str) -> str:
    """Last path segment, used for the PROJECT column."""
    stripped = decoded.rstrip("/")
    return stripped.rsplit("/", 1)[-1] if stripped else decoded


def default_projects_dir() -> Path:
    """Storage root: $CLAUDE_CONFIG_DIR/projects, else ~/.claude/projects."""
    config_dir = os.environ.get("CLAUDE_CONFIG_DIR")
    if config_dir:
        return Path(config_dir).expanduser() / "projects"
    return Path.home() / ".claude" / "projects"
