"""Data layer for replay logs shared by the TUI and the headless runner."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from ..types import AgentSession, Interrupt, Op, RestoreCompleted, UserInput


@dataclass
class OpRecord:
    """One operation handed to the agent session during a replay."""

    index: int
    kind: str  # "user_input" or "interrupt"
    text: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_op(cls, index: int, op: Op) -> OpRecord:
        if isinstance(op, UserInput):
            return cls(index=index, kind="user_input", text=op.text)
        if isinstance(op, Interrupt):
            return cls(index=index, kind="interrupt")
        raise TypeError(f"Unknown op: {op!r}")

    def to_export_dict(self) -> dict:
        """Serializable dict for JSON export."""
        d = {
            "index": self.index,
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind,
        }
        if self.text:
            d["text"] = self.text
        return d


def save_replay_log(
    records: list[OpRecord],
    directory: str = ".",
    transcript: str = "",
    completion: RestoreCompleted | None = None,
) -> Path:
    """Save all ops to replay-log.json. Returns the file path."""
    path = Path(directory) / "replay-log.json"
    data = {
        "transcript": transcript,
        "total_ops": len(records),
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "completed": completion is not None,
        "ops": [r.to_export_dict() for r in records],
    }
    if completion is not None:
        data["approx_tokens"] = completion.approx_tokens
        data["segments"] = completion.segments
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False))
    return path


class LoggedAgentSession:
    """Forwards ops to an agent session and records each one as an OpRecord."""

    def __init__(self, inner: AgentSession | None = None) -> None:
        self._inner = inner
        self.records: list[OpRecord] = []

    def submit(self, op: Op) -> None:
        self.records.append(OpRecord.from_op(len(self.records), op))
        if self._inner is not None:
            self._inner.submit(op)
