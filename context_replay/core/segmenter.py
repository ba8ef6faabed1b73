"""TokenSegmenter: split replay items into budget-bounded contiguous ranges."""

from __future__ import annotations

import logging
from typing import Sequence

from ..token_counter import estimate_tokens
from ..types import Item, ReplaySettings, Segment, TokenEstimator

logger = logging.getLogger(__name__)


def segment_items_by_tokens(
    items: Sequence[Item],
    max_tokens_per_chunk: int,
    estimator: TokenEstimator = estimate_tokens,
) -> list[Segment]:
    """Greedy forward scan over *items*.

    Each segment grows one item at a time while the estimate of the whole
    range stays within *max_tokens_per_chunk*. An item that alone exceeds
    the budget becomes a one-item segment with its own estimate.
    """
    segments: list[Segment] = []
    start = 0
    n = len(items)
    while start < n:
        end = start
        est = 0
        while end < n:
            e = estimator(items[start:end + 1])
            if e > max_tokens_per_chunk:
                break
            est = e
            end += 1
        if end == start:
            # single over-limit item; atomic
            segments.append(Segment(start, start + 1, estimator(items[start:start + 1])))
            start += 1
            continue
        segments.append(Segment(start, end, est))
        start = end
    return segments


class TokenSegmenter:
    """Partitions a filtered item list using the configured chunk ceiling."""

    def __init__(
        self,
        config: ReplaySettings,
        estimator: TokenEstimator | None = None,
    ) -> None:
        self.config = config
        self.estimator = estimator or estimate_tokens

    def segment(self, items: Sequence[Item]) -> list[Segment]:
        if not items:
            return []
        segments = segment_items_by_tokens(
            items, self.config.max_tokens_per_chunk, self.estimator,
        )
        oversized = sum(
            1 for s in segments if s.token_estimate > self.config.max_tokens_per_chunk
        )
        if oversized:
            logger.debug(
                "%d of %d segments exceed %d tokens (atomic items)",
                oversized, len(segments), self.config.max_tokens_per_chunk,
            )
        return segments
