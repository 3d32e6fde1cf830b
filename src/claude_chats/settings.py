"""User settings loaded from ~/.config/claude-chats/settings.json."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from claude_chats.models import DEFAULT_ACTIVE_WINDOW
from claude_chats.paths import default_projects_dir

SETTINGS_PATH = Path.home() / ".config" / "claude-chats" / "settings.json"

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    projects_dir: Path = field(default_factory=default_projects_dir)
    active_window_minutes: float = DEFAULT_ACTIVE_WINDOW.total_seconds() / 60
    excluded_workspaces: list[str] = field(default_factory=list)

    @property
    def active_window(self) -> timedelta:
        return timedelta(minutes=self.active_window_minutes)

    @staticmethod
    def load(path: Path | None = None) -> Settings:
        path = path or SETTINGS_PATH
        if not path.exists():
            return Settings()
        try:
            data = json.loads(path.read_text())
            if not isinstance(data, dict):
                raise ValueError("settings must be a JSON object")
            settings = Settings(
                excluded_workspaces=list(data.get("excluded_workspaces", [])),
            )
            if data.get("projects_dir"):
                settings.projects_dir = Path(data["projects_dir"]).expanduser()
            if data.get("active_window_minutes") is not None:
                settings.active_window_minutes = float(data["active_window_minutes"])
            return settings
        except (ValueError, TypeError, OSError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", path, e)
            return Settings()
