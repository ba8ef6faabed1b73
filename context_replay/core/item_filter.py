"""Item filtering: keep only records that are valid for replay.

Pure functions. State snapshots, tool-event audit lines and unknown record
types are dropped here so they can never reach a plan.
"""

from __future__ import annotations

from typing import Any, Iterable

from ..types import REPLAY_KINDS, Item


def as_item(record: Any) -> Item:
    """Return *record* as an Item, parsing raw dicts."""
    if isinstance(record, Item):
        return record
    return Item.from_record(record)


def is_replay_item(item: Item) -> bool:
    return item.kind in REPLAY_KINDS


def filter_replay_items(records: Iterable[Any]) -> list[Item]:
    """Keep replay-eligible items, preserving order.

    Accepts Items or raw record dicts.
    """
    return [item for item in map(as_item, records) if is_replay_item(item)]
