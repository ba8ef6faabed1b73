"""Headless replay runner: no TUI, same session + driver pipeline."""

from __future__ import annotations

import sys
from pathlib import Path

from ..core.progress import format_summary
from ..session import ReplaySession
from ..types import (
    AgentSession,
    ContextReplayConfig,
    InsertHistory,
    ReplayTrigger,
    StepOutcome,
)
from .state import LoggedAgentSession, OpRecord, save_replay_log


class HeadlessReplayRunner:
    """Replay a transcript into an agent session without a terminal UI.

    Produces the same ``replay-log.json`` as the interactive TUI, but
    prints progress to stderr instead of rendering widgets. By default the
    runner advances with ticks, exactly like the TUI's auto-advance timer;
    ``manual=True`` (or ``auto_advance: false``) uses confirm presses.
    """

    def __init__(
        self,
        config_path: str | None = None,
        config: ContextReplayConfig | None = None,
        agent: AgentSession | None = None,
        manual: bool = False,
        echo_history: bool = False,
    ) -> None:
        self.session = ReplaySession(config_path=config_path, config=config)
        self._agent = LoggedAgentSession(agent)
        self._echo_history = echo_history
        auto = self.session.config.replay.auto_advance
        self._trigger = (
            ReplayTrigger.CONFIRM if manual or not auto else ReplayTrigger.TICK
        )

    @property
    def records(self) -> list[OpRecord]:
        return self._agent.records

    def run(
        self,
        transcript: Path | str,
        output: Path | str | None = None,
    ) -> list[OpRecord]:
        """Plan and deliver *transcript*, return the recorded ops.

        Args:
            transcript: JSONL transcript to replay.
            output: Directory to write ``replay-log.json`` into.
                    Defaults to the configured output directory.
        """
        session = self.session
        plan = session.plan_transcript(transcript)
        session.start(plan)
        session.pump(self._agent, history=self._print_history)

        steps = 0
        while session.is_active:
            outcome = session.handle(self._trigger)
            steps += 1
            session.pump(self._agent, history=self._print_history)
            if outcome is not StepOutcome.SPLIT:
                print(f"Step {steps}: {format_summary(session.progress())}", file=sys.stderr)

        out_dir = str(output) if output is not None else session.config.output.directory
        path = save_replay_log(
            self._agent.records,
            directory=out_dir,
            transcript=str(transcript),
            completion=session.last_completion,
        )
        print(f"\nReplay log saved to {path.resolve()}", file=sys.stderr)
        return self._agent.records

    def _print_history(self, event: InsertHistory) -> None:
        # notices always; replayed items only when echoing
        if event.items and not self._echo_history:
            return
        for line in event.lines:
            print(line, file=sys.stderr)
