"""Build replay plans from transcript items."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from ..token_counter import estimate_tokens
from ..types import ReplayPlan, ReplaySettings, TokenEstimator
from .item_filter import as_item, filter_replay_items
from .segmenter import TokenSegmenter

logger = logging.getLogger(__name__)


def build_plan(
    records: Sequence[Any],
    settings: ReplaySettings | None = None,
    estimator: TokenEstimator | None = None,
) -> ReplayPlan:
    """Filter, segment and total *records* (Items or raw dicts).

    ``token_total`` is estimated over every record before filtering; it is
    only used as the percentage denominator.
    """
    settings = settings or ReplaySettings()
    estimator = estimator or estimate_tokens

    all_items = [as_item(r) for r in records]
    token_total = estimator(all_items)
    items = filter_replay_items(all_items)
    segments = TokenSegmenter(settings, estimator).segment(items)

    logger.info(
        "Replay plan: %d items (%d dropped), %d segments, ~%d tokens",
        len(items), len(all_items) - len(items), len(segments), token_total,
    )
    return ReplayPlan(
        items=tuple(items),
        segments=segments,
        token_total=token_total,
        max_tokens_per_send=settings.max_tokens_per_send,
        max_tokens_per_chunk=settings.max_tokens_per_chunk,
    )


def describe_plan(plan: ReplayPlan) -> list[str]:
    """Summary lines shown before delivery starts."""
    return [
        "Experimental restore",
        "Experimental restore: This will restore the entire prior conversation "
        "history to the server-side context.",
        f"Experimental restore plan: {len(plan.segments)} segments "
        f"(~{plan.token_total} tokens).",
        "Press Enter to continue; Esc cancels.",
    ]
