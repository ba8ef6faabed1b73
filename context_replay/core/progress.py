"""Progress-line formatting for any UI layer."""

from __future__ import annotations

from ..types import ProgressSnapshot, ReplayStatus

MIN_BAR_WIDTH = 10


def format_progress(snapshot: ProgressSnapshot, width: int = 80) -> str:
    """Render one status line: ready prompt, cancelled notice, or a bar.

    The bar fills the space left after the ``Restoring: NNN%`` label but is
    never narrower than MIN_BAR_WIDTH columns (brackets included).
    """
    if snapshot.status is ReplayStatus.CANCELLED:
        return "Restore cancelled"
    complete = snapshot.status is ReplayStatus.COMPLETE
    if snapshot.percent == 0 and not complete:
        return "Replay ready. Enter to start; Esc cancels."

    pct = min(snapshot.percent, 100)
    label = f"Restoring: {pct:>3}%"
    bar_w = max(width - (len(label) + 1), MIN_BAR_WIDTH)
    fill_w = ((bar_w - 2) * pct) // 100
    empty_w = bar_w - 2 - fill_w
    return f"{label} [{'#' * fill_w}{'-' * empty_w}]"


def format_summary(snapshot: ProgressSnapshot) -> str:
    """Short ``done/total`` line for status bars and stderr progress."""
    return (
        f"{snapshot.segments_done}/{snapshot.segments_total} segments, "
        f"~{snapshot.tokens_sent:,} tokens ({snapshot.percent}%)"
    )
