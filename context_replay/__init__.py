"""context-replay: bounded-size conversation replay into a live agent session."""

from .config import load_config
from .core.driver import ReplayDriver
from .core.item_filter import filter_replay_items
from .core.outbox import EventOutbox
from .core.planner import build_plan
from .core.segmenter import segment_items_by_tokens
from .session import ReplaySession
from .token_counter import estimate_tokens
from .types import (
    ContextReplayConfig,
    Interrupt,
    Item,
    ItemKind,
    ReplayPlan,
    ReplayStatus,
    Segment,
    UserInput,
)

__version__ = "0.1.0"

__all__ = [
    "ReplaySession",
    "ReplayDriver",
    "EventOutbox",
    "load_config",
    "build_plan",
    "estimate_tokens",
    "filter_replay_items",
    "segment_items_by_tokens",
    "ContextReplayConfig",
    "Interrupt",
    "Item",
    "ItemKind",
    "ReplayPlan",
    "ReplayStatus",
    "Segment",
    "UserInput",
]
