"""Scrollable replay history display."""

from __future__ import annotations

from rich.markup import escape
from textual.widgets import RichLog

# line prefix -> markup style
_PREFIX_STYLES = (
    ("user:", "bold cyan"),
    ("assistant:", "bold green"),
    ("thinking:", "magenta italic"),
    ("[tool:", "yellow"),
    ("output:", "dim"),
    ("$ ", "yellow"),
)


class HistoryView(RichLog):
    """Shows restored transcript lines and replay notices, auto-scrolling."""

    def __init__(self, **kwargs) -> None:
        super().__init__(markup=True, wrap=True, auto_scroll=True, **kwargs)
        self._message_log: list[str] = []

    @property
    def lines_written(self) -> list[str]:
        return list(self._message_log)

    def _write_line(self, markup: str) -> None:
        self._message_log.append(markup)
        self.write(markup)

    def add_replayed_line(self, text: str) -> None:
        for prefix, style in _PREFIX_STYLES:
            if text.startswith(prefix):
                head, rest = text[:len(prefix)], text[len(prefix):]
                self._write_line(f"[{style}]{escape(head)}[/{style}]{escape(rest)}")
                return
        self._write_line(escape(text))

    def add_system_message(self, text: str) -> None:
        self._write_line(f"[dim italic]{escape(text)}[/dim italic]")
