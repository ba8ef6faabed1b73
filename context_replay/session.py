"""ReplaySession: owns the single live replay driver for an agent session."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Sequence

from .config import load_config, validate_config
from .core.driver import ReplayDriver
from .core.outbox import EventOutbox
from .core.planner import build_plan, describe_plan
from .token_counter import create_token_estimator
from .transcript import load_transcript
from .types import (
    AgentOp,
    AgentSession,
    ContextReplayConfig,
    InsertHistory,
    Op,
    ProgressSnapshot,
    ReplayEvent,
    ReplayPlan,
    ReplayStatus,
    ReplayTrigger,
    RestoreCompleted,
    StepOutcome,
)

logger = logging.getLogger(__name__)


class RecordingAgentSession:
    """In-memory agent session that keeps every submitted op."""

    def __init__(self) -> None:
        self.ops: list[Op] = []

    def submit(self, op: Op) -> None:
        self.ops.append(op)


class ReplaySession:
    """Maps trigger sources onto one ReplayDriver.

    Usage:
        session = ReplaySession(config_path="./context-replay.yaml")
        session.start(session.plan_transcript("rollout.jsonl"))

        # timer callback and Enter key handler
        session.on_tick()
        session.confirm()

        # deliver emitted events
        session.pump(agent, history=view.show)
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        config: ContextReplayConfig | None = None,
        outbox: EventOutbox | None = None,
    ) -> None:
        self.config = config or load_config(config_path)
        errors = validate_config(self.config)
        if errors:
            raise ValueError("invalid config: " + "; ".join(errors))
        self._estimator = create_token_estimator(self.config.token_counter)
        self.outbox = outbox or EventOutbox()
        self.driver = ReplayDriver(
            self.outbox,
            settings=self.config.replay,
            estimator=self._estimator,
            on_complete=self._on_restore_completed,
        )
        self.last_completion: RestoreCompleted | None = None
        self._pending_usage_tokens = 0

    # -- planning ----------------------------------------------------------

    def plan_records(self, records: Sequence[Any]) -> ReplayPlan:
        return build_plan(records, self.config.replay, self._estimator)

    def plan_transcript(self, path: str | Path) -> ReplayPlan:
        transcript = load_transcript(path)
        return self.plan_records(transcript.items)

    def start(self, plan: ReplayPlan, announce: bool = True) -> None:
        """Accept *plan*; an earlier plan, finished or not, is discarded."""
        self.last_completion = None
        self.driver.accept(plan)
        if announce:
            self.outbox.insert_history(*describe_plan(plan))

    # -- triggers ----------------------------------------------------------

    def handle(self, trigger: ReplayTrigger) -> StepOutcome:
        if trigger is ReplayTrigger.CANCEL:
            self.driver.cancel()
            return StepOutcome.NOOP
        if trigger is ReplayTrigger.TICK and not self.config.replay.auto_advance:
            return StepOutcome.NOOP
        return self.driver.advance()

    def on_tick(self) -> StepOutcome:
        return self.handle(ReplayTrigger.TICK)

    def confirm(self) -> StepOutcome:
        return self.handle(ReplayTrigger.CONFIRM)

    def cancel(self) -> None:
        self.handle(ReplayTrigger.CANCEL)

    def run_to_completion(self, trigger: ReplayTrigger = ReplayTrigger.CONFIRM) -> int:
        """Drive the current plan until it finishes. Returns the step count."""
        if trigger is ReplayTrigger.CANCEL:
            raise ValueError("run_to_completion needs an advancing trigger")
        if trigger is ReplayTrigger.TICK and not self.config.replay.auto_advance:
            raise ValueError("ticks do not advance when replay.auto_advance is off")
        steps = 0
        while self.is_active:
            self.handle(trigger)
            steps += 1
        return steps

    # -- state -------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.driver.status is ReplayStatus.ACTIVE

    def is_complete(self) -> bool:
        return self.driver.is_complete()

    def progress(self) -> ProgressSnapshot:
        return self.driver.progress()

    def take_pending_usage(self) -> int:
        """Restored-token estimate to report with the next turn, then reset."""
        tokens, self._pending_usage_tokens = self._pending_usage_tokens, 0
        return tokens

    def pump(
        self,
        agent: AgentSession,
        history: Callable[[InsertHistory], None] | None = None,
    ) -> list[ReplayEvent]:
        """Drain the outbox: ops to *agent*, history fragments to *history*."""
        events = self.outbox.drain()
        for event in events:
            if isinstance(event, AgentOp):
                agent.submit(event.op)
            elif isinstance(event, InsertHistory) and history is not None:
                history(event)
        return events

    def _on_restore_completed(self, completion: RestoreCompleted) -> None:
        self.last_completion = completion
        self._pending_usage_tokens = completion.approx_tokens
        logger.info(
            "Restore completed: ~%d tokens over %d planned segments",
            completion.approx_tokens, completion.segments,
        )
