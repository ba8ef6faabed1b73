"""EventOutbox: fire-and-forget queue between the driver and its consumers."""

from __future__ import annotations

from collections import deque

from ..types import AgentOp, InsertHistory, Op, ReplayEvent


class EventOutbox:
    """Ordered, unbounded event queue. Producers never block."""

    def __init__(self) -> None:
        self._events: deque[ReplayEvent] = deque()

    def send(self, event: ReplayEvent) -> None:
        self._events.append(event)

    def send_op(self, op: Op) -> None:
        self.send(AgentOp(op))

    def insert_history(self, *lines: str, items: tuple = ()) -> None:
        self.send(InsertHistory(lines=tuple(lines), items=tuple(items)))

    def drain(self) -> list[ReplayEvent]:
        """Remove and return every pending event in emission order."""
        events = list(self._events)
        self._events.clear()
        return events

    def __len__(self) -> int:
        return len(self._events)
