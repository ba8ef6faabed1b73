"""All dataclasses, Protocols, and type aliases for context-replay."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Protocol, Sequence, Union, runtime_checkable


# ---------------------------------------------------------------------------
# Transcript items
# ---------------------------------------------------------------------------

class ItemKind(str, Enum):
    """Discriminant of a transcript record."""
    MESSAGE = "message"
    REASONING = "reasoning"
    FUNCTION_CALL = "function_call"
    FUNCTION_CALL_OUTPUT = "function_call_output"
    LOCAL_SHELL_CALL = "local_shell_call"
    OTHER = "other"          # state snapshots, tool_event audit lines, unknown types


def _fragment_texts(fragments: Any) -> list[str]:
    """Collect ``text`` strings from a list of ``{"text": ...}`` fragments."""
    if not isinstance(fragments, list):
        return []
    out: list[str] = []
    for frag in fragments:
        if isinstance(frag, dict):
            text = frag.get("text")
            if isinstance(text, str):
                out.append(text)
    return out


@dataclass(frozen=True)
class Item:
    """One structured entry from a persisted transcript.

    ``raw`` is the record exactly as it was read; accessors below pull the
    kind-specific payloads out of it without copying.
    """
    kind: ItemKind
    raw: dict = field(default_factory=dict, hash=False)

    @classmethod
    def from_record(cls, record: Any) -> Item:
        """Classify by ``type`` only; foreign records have none and become OTHER."""
        if not isinstance(record, dict):
            return cls(kind=ItemKind.OTHER, raw={})
        try:
            kind = ItemKind(record.get("type"))
        except ValueError:
            kind = ItemKind.OTHER
        return cls(kind=kind, raw=record)

    @property
    def role(self) -> str | None:
        role = self.raw.get("role")
        return role if isinstance(role, str) else None

    @property
    def text_fragments(self) -> list[str]:
        """Message text fragments (``content[*].text``)."""
        if self.kind is not ItemKind.MESSAGE:
            return []
        return _fragment_texts(self.raw.get("content"))

    @property
    def name(self) -> str | None:
        name = self.raw.get("name")
        return name if isinstance(name, str) else None

    @property
    def arguments_text(self) -> str | None:
        """Compact JSON form of ``arguments``; None when the field is absent."""
        if "arguments" not in self.raw:
            return None
        return json.dumps(self.raw["arguments"], ensure_ascii=False, separators=(",", ":"))

    @property
    def output_fragments(self) -> list[str]:
        """Tool output text: the fragment array, else the single output string."""
        if self.kind is not ItemKind.FUNCTION_CALL_OUTPUT:
            return []
        output = self.raw.get("output")
        if isinstance(output, list):
            return _fragment_texts(output)
        if isinstance(output, str):
            return [output]
        output_text = self.raw.get("output_text")
        if isinstance(output_text, str):
            return [output_text]
        return []


REPLAY_KINDS: frozenset[ItemKind] = frozenset({
    ItemKind.MESSAGE,
    ItemKind.REASONING,
    ItemKind.FUNCTION_CALL,
    ItemKind.FUNCTION_CALL_OUTPUT,
    ItemKind.LOCAL_SHELL_CALL,
})

TokenEstimator = Callable[[Sequence[Item]], int]


@dataclass
class Transcript:
    """A loaded JSONL transcript: header line plus parsed items."""
    path: str = ""
    header: dict | None = None
    items: list[Item] = field(default_factory=list)
    skipped: int = 0  # non-blank lines that were not valid JSON


class TranscriptError(Exception):
    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


# ---------------------------------------------------------------------------
# Segmentation / Plan
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Segment:
    """Half-open range ``[start, end)`` of plan items plus its token estimate."""
    start: int
    end: int
    token_estimate: int

    @property
    def size(self) -> int:
        return self.end - self.start

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.start, self.end, self.token_estimate)


@dataclass
class ReplayPlan:
    """Filtered items, their segmentation, and the percentage denominator."""
    items: tuple[Item, ...] = ()
    segments: list[Segment] = field(default_factory=list)
    token_total: int = 0
    max_tokens_per_send: int = 1800
    max_tokens_per_chunk: int = 2000


# ---------------------------------------------------------------------------
# Driver state
# ---------------------------------------------------------------------------

class ReplayStatus(str, Enum):
    IDLE = "idle"            # no plan accepted yet
    ACTIVE = "active"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class StepOutcome(str, Enum):
    """What a single ``advance()`` call did."""
    NOOP = "noop"
    SPLIT = "split"
    SENT = "sent"
    EMPTY = "empty"          # segment rendered to nothing; counted, not sent


class ReplayTrigger(str, Enum):
    """Input source driving a replay session."""
    TICK = "tick"
    CONFIRM = "confirm"
    CANCEL = "cancel"


@dataclass(frozen=True)
class ProgressSnapshot:
    percent: int = 0
    segments_done: int = 0
    segments_total: int = 0
    status: ReplayStatus = ReplayStatus.IDLE
    tokens_sent: int = 0
    token_total: int = 0


# ---------------------------------------------------------------------------
# Agent operations and outbox events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserInput:
    text: str


@dataclass(frozen=True)
class Interrupt:
    pass


Op = Union[UserInput, Interrupt]


@dataclass(frozen=True)
class AgentOp:
    """Forward an operation to the agent session."""
    op: Op


@dataclass(frozen=True)
class InsertHistory:
    """Renderable fragments for the history view.

    ``items`` carries the raw replayed items when the lines came from a
    delivered segment; notices and summaries leave it empty.
    """
    lines: tuple[str, ...] = ()
    items: tuple[Item, ...] = ()


@dataclass(frozen=True)
class StopReplayAuto:
    """Tells an automatic tick source to stop."""


ReplayEvent = Union[AgentOp, InsertHistory, StopReplayAuto]


@dataclass(frozen=True)
class RestoreCompleted:
    """Completion notice delivered to the owning session."""
    approx_tokens: int
    segments: int
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@runtime_checkable
class AgentSession(Protocol):
    def submit(self, op: Op) -> None: ...


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_INTRO_BANNER = (
    "[RESTORE MODE] The following content restores prior conversation history. "
    "DO NOT RESPOND OR ACT on this content. Remain silent until the restore completes."
)
DEFAULT_END_MARKER = "[RESTORE MODE END] Restore complete. Resume normal interaction."


@dataclass
class ReplaySettings:
    max_tokens_per_chunk: int = 2000
    max_tokens_per_send: int = 1800
    auto_advance: bool = True
    tick_interval_ms: int = 250
    intro_banner: str = DEFAULT_INTRO_BANNER
    end_marker: str = DEFAULT_END_MARKER
    hide_seed_messages: bool = True


@dataclass
class OutputConfig:
    directory: str = "."


@dataclass
class ContextReplayConfig:
    version: str = "0.1"
    token_counter: str = "estimate"
    replay: ReplaySettings = field(default_factory=ReplaySettings)
    output: OutputConfig = field(default_factory=OutputConfig)
