"""Browse and clean up Claude Code conversation history."""

__version__ = "0.1.0"
