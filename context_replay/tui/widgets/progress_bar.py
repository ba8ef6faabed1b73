"""Replay progress line with segment counts."""

from __future__ import annotations

from rich.markup import escape
from textual.widgets import Static

from ...core.progress import format_progress
from ...types import ProgressSnapshot, ReplayStatus


class RestoreProgressBar(Static):
    """Shows replay progress as a one-line bar plus a segment breakdown."""

    DEFAULT_CSS = """
    RestoreProgressBar {
        padding: 0 1;
        height: 3;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__("", **kwargs)
        self._snapshot = ProgressSnapshot()

    @property
    def snapshot(self) -> ProgressSnapshot:
        return self._snapshot

    def on_mount(self) -> None:
        self._refresh_display()

    def on_resize(self) -> None:
        self._refresh_display()

    def update_progress(self, snapshot: ProgressSnapshot) -> None:
        self._snapshot = snapshot
        self._refresh_display()

    def _refresh_display(self) -> None:
        snap = self._snapshot
        width = max(self.size.width - 2, 20) if self.size.width else 80
        line = escape(format_progress(snap, width=width))

        if snap.status is ReplayStatus.CANCELLED:
            color = "red"
        elif snap.status is ReplayStatus.COMPLETE:
            color = "green"
        else:
            color = "yellow"

        lines = [
            f"[{color}]{line}[/{color}]",
            f"  {snap.segments_done}/{snap.segments_total} segments  "
            f"~{snap.tokens_sent:,}/{snap.token_total:,} tokens",
        ]
        self.update("\n".join(lines))
