"""ReplayApp: Textual application wiring a replay session to the terminal."""

from __future__ import annotations

from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.timer import Timer
from textual.widgets import Footer

from ..session import RecordingAgentSession, ReplaySession
from ..types import (
    AgentSession,
    InsertHistory,
    ReplayPlan,
    ReplayTrigger,
    StopReplayAuto,
)
from .state import LoggedAgentSession, OpRecord, save_replay_log
from .widgets.history_view import HistoryView
from .widgets.progress_bar import RestoreProgressBar


class ReplayApp(App):
    """Restore a transcript into an agent session with a progress overlay."""

    DEFAULT_CSS = """
    #history-view {
        height: 1fr;
        border: round $primary;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("enter", "confirm", "Send Next", priority=True),
        Binding("escape", "cancel_replay", "Cancel", priority=True),
        Binding("ctrl+s", "save_log", "Save Log", priority=True),
    ]

    def __init__(
        self,
        plan: ReplayPlan,
        session: ReplaySession | None = None,
        agent: AgentSession | None = None,
        transcript: str = "",
        log_directory: str | None = None,
    ) -> None:
        super().__init__()
        self.session = session or ReplaySession()
        self.agent = LoggedAgentSession(agent or RecordingAgentSession())
        self._plan = plan
        self._transcript = transcript
        self._log_directory = log_directory
        self._replay_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        with Vertical():
            yield HistoryView(id="history-view")
            yield RestoreProgressBar(id="progress-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.session.start(self._plan)
        self._deliver_events()
        replay = self.session.config.replay
        if replay.auto_advance:
            self._replay_timer = self.set_interval(
                replay.tick_interval_ms / 1000, self._tick,
            )

    @property
    def _history_view(self) -> HistoryView:
        return self.query_one("#history-view", HistoryView)

    @property
    def _progress_bar(self) -> RestoreProgressBar:
        return self.query_one("#progress-bar", RestoreProgressBar)

    @property
    def records(self) -> list[OpRecord]:
        return self.agent.records

    def _tick(self) -> None:
        self._handle_trigger(ReplayTrigger.TICK)

    def action_confirm(self) -> None:
        self._handle_trigger(ReplayTrigger.CONFIRM)

    def action_cancel_replay(self) -> None:
        self._handle_trigger(ReplayTrigger.CANCEL)
        self._stop_timer()

    def action_save_log(self) -> None:
        directory = self._log_directory or self.session.config.output.directory
        path = save_replay_log(
            self.agent.records,
            directory=directory,
            transcript=self._transcript,
            completion=self.session.last_completion,
        )
        self._history_view.add_system_message(f"Replay log saved to {path}")

    def _handle_trigger(self, trigger: ReplayTrigger) -> None:
        self.session.handle(trigger)
        self._deliver_events()

    def _deliver_events(self) -> None:
        """Deliver pending session events to the agent and the widgets."""
        for event in self.session.pump(self.agent, history=self._show_history):
            if isinstance(event, StopReplayAuto):
                self._stop_timer()
        self._progress_bar.update_progress(self.session.progress())

    def _show_history(self, event: InsertHistory) -> None:
        view = self._history_view
        if event.items:
            for line in event.lines:
                view.add_replayed_line(line)
        else:
            for line in event.lines:
                view.add_system_message(line)

    def _stop_timer(self) -> None:
        if self._replay_timer is not None:
            self._replay_timer.stop()
            self._replay_timer = None


def run_replay(
    transcript: str | Path,
    config_path: str | None = None,
    agent: AgentSession | None = None,
    log_directory: str | None = None,
    session: ReplaySession | None = None,
) -> None:
    """Launch the TUI replay for *transcript*.

    Raises TranscriptError before the app starts if the file cannot be read.
    """
    session = session or ReplaySession(config_path=config_path)
    plan = session.plan_transcript(transcript)
    app = ReplayApp(
        plan,
        session=session,
        agent=agent,
        transcript=str(transcript),
        log_directory=log_directory,
    )
    app.run()
