"""Static widget that paints a controller DisplayBuffer."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from claude_chats.controller import DisplayBuffer

CURSOR_STYLE = "bold reverse"
ACTIVE_STYLE = "#c97070"
ACTIVE_CURSOR_STYLE = "bold reverse #c97070"


class ConversationView(Static):
    """Shows the rendered list; the cursor row is reversed, active rows red."""

    DEFAULT_CSS = """
    ConversationView {
        height: 1fr;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._shown = DisplayBuffer([])

    @property
    def shown(self) -> DisplayBuffer:
        return self._shown

    def show(self, buffer: DisplayBuffer) -> None:
        self._shown = buffer
        text = Text(no_wrap=True, overflow="crop")
        for i, line in enumerate(buffer.lines):
            if i:
                text.append("\n")
            if i == buffer.highlight:
                style = ACTIVE_CURSOR_STYLE if i in buffer.emphasis else CURSOR_STYLE
            elif i in buffer.emphasis:
                style = ACTIVE_STYLE
            else:
                style = ""
            text.append(line, style=style)
        self.update(text)
