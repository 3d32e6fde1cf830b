"""Read titles, timestamps and session references from JSONL transcripts."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

TITLE_LENGTH = 50
WARMUP_TEXT = "Warmup"

# User messages that aren't real prompts
_SKIP_PREFIXES = (
    "[Request interrupted",
    "<ide_",
)


@dataclass
class TranscriptSummary:
    title: str | None = None
    last_timestamp: datetime | None = None
    session_id: str | None = None   # first sessionId field seen
    warmup_prompts: int = 0
    real_prompts: int = 0


def is_warmup(summary: TranscriptSummary) -> bool:
    """Cache-warming transcripts: only ever prompted with the literal 'Warmup'."""
    return summary.warmup_prompts > 0 and summary.real_prompts == 0


def parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def extract_user_text(entry: dict) -> str:
    """First line of the text content of a user entry, or empty string.

    String content is used as-is; list content uses the first text block
    that isn't an IDE context block.
    """
    msg = entry.get("message", {})
    content = msg.get("content", "") if isinstance(msg, dict) else ""
    if isinstance(content, str):
        raw = content
    elif isinstance(content, list):
        raw = ""
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text", "")
                if isinstance(text, str) and not text.startswith("<ide_"):
                    raw = text
                    break
    else:
        return ""
    lines = raw.strip().splitlines()
    return lines[0].strip().replace("\t", " ") if lines else ""


def truncate_title(text: str, length: int = TITLE_LENGTH) -> str:
    if len(text) > length:
        return text[:length] + "..."
    return text


def summarize_transcript(path: Path) -> TranscriptSummary:
    """Stream a transcript once, collecting everything the scanner needs.

    Lines that aren't valid JSON objects are skipped. Raises OSError if
    the file can't be read.
    """
    summary = TranscriptSummary()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(entry, dict):
                continue

            ts = parse_timestamp(entry.get("timestamp"))
            if ts is not None:
                summary.last_timestamp = ts
            if summary.session_id is None and isinstance(entry.get("sessionId"), str):
                summary.session_id = entry["sessionId"]

            if entry.get("type") != "user":
                continue
            text = extract_user_text(entry)
            if not text or any(text.startswith(p) for p in _SKIP_PREFIXES):
                continue
            if text == WARMUP_TEXT:
                summary.warmup_prompts += 1
                continue
            summary.real_prompts += 1
            if summary.title is None:
                summary.title = truncate_title(text)
    return summary
