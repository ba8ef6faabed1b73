"""ReplayDriver: step-wise delivery of a replay plan to an agent session.

Every content send is immediately followed by an Interrupt so the agent
never acts on restored history. The end-of-restore marker is the only
UserInput sent without a trailing Interrupt, so the next real user turn is
not swallowed.

Segments larger than the plan's send ceiling are bisected in place, one
split per ``advance()`` call, until each is under the ceiling or a single
(atomic) item.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from ..token_counter import estimate_tokens
from ..transcript import render_replay_lines
from ..types import (
    Interrupt,
    Item,
    ItemKind,
    ProgressSnapshot,
    ReplayPlan,
    ReplaySettings,
    ReplayStatus,
    RestoreCompleted,
    Segment,
    StepOutcome,
    StopReplayAuto,
    TokenEstimator,
    UserInput,
)
from .outbox import EventOutbox

logger = logging.getLogger(__name__)


def render_payload(items: Sequence[Item]) -> str:
    """Flatten items into the text of a single UserInput.

    Messages contribute their text fragments, tool calls a
    ``[tool:<name>] <arguments>`` line, tool outputs their output text.
    Other kinds contribute nothing.
    """
    parts: list[str] = []
    for item in items:
        if item.kind is ItemKind.MESSAGE:
            parts.extend(t + "\n" for t in item.text_fragments)
        elif item.kind is ItemKind.FUNCTION_CALL:
            name = item.name or "tool"
            args = item.arguments_text or "{}"
            parts.append(f"[tool:{name}] {args}\n")
        elif item.kind is ItemKind.FUNCTION_CALL_OUTPUT:
            parts.extend(t + "\n" for t in item.output_fragments)
    return "".join(parts)


class ReplayDriver:
    """Owns the cursor, sent-token count and status of one replay plan.

    ``advance()`` is the only transition; tick sources and the confirm key
    must both call it so automatic and manual delivery end identically.
    """

    def __init__(
        self,
        outbox: EventOutbox,
        settings: ReplaySettings | None = None,
        estimator: TokenEstimator | None = None,
        on_complete: Callable[[RestoreCompleted], None] | None = None,
    ) -> None:
        self.outbox = outbox
        self.settings = settings or ReplaySettings()
        self.estimator = estimator or estimate_tokens
        self._on_complete = on_complete
        self._plan: ReplayPlan | None = None
        self._segments: list[Segment] = []
        self._token_total = 1
        self._original_segments = 0
        self._cursor = 0
        self._tokens_sent = 0
        self._intro_sent = False
        self._status = ReplayStatus.IDLE
        self.last_completion: RestoreCompleted | None = None

    # -- read-only state ---------------------------------------------------

    @property
    def plan(self) -> ReplayPlan | None:
        return self._plan

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def tokens_sent(self) -> int:
        return self._tokens_sent

    @property
    def intro_sent(self) -> bool:
        return self._intro_sent

    @property
    def status(self) -> ReplayStatus:
        return self._status

    @property
    def percent(self) -> int:
        return min(100, (100 * self._tokens_sent) // self._token_total)

    def is_complete(self) -> bool:
        return self._status in (ReplayStatus.COMPLETE, ReplayStatus.CANCELLED)

    def progress(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            percent=self.percent,
            segments_done=min(self._cursor, len(self._segments)),
            segments_total=len(self._segments),
            status=self._status,
            tokens_sent=self._tokens_sent,
            token_total=self._token_total,
        )

    # -- transitions -------------------------------------------------------

    def accept(self, plan: ReplayPlan) -> None:
        """Install *plan*, discarding any previous plan state."""
        if self._status is ReplayStatus.ACTIVE:
            logger.info(
                "Replacing active replay plan at segment %d/%d",
                self._cursor, len(self._segments),
            )
        self._plan = plan
        self._segments = list(plan.segments)
        self._token_total = max(plan.token_total, 1)
        self._original_segments = len(plan.segments)
        self._cursor = 0
        self._tokens_sent = 0
        self._intro_sent = False
        self._status = ReplayStatus.ACTIVE
        self.last_completion = None
        logger.info(
            "Replay plan accepted: %d segments, ~%d tokens, send ceiling %d",
            len(self._segments), plan.token_total, plan.max_tokens_per_send,
        )

    def advance(self) -> StepOutcome:
        """Split the current segment, or send it and move the cursor."""
        if self._status is not ReplayStatus.ACTIVE or self._plan is None:
            return StepOutcome.NOOP
        if self._cursor >= len(self._segments):
            # only an empty plan gets here
            self._finish()
            return StepOutcome.NOOP

        seg = self._segments[self._cursor]
        if seg.token_estimate > self._plan.max_tokens_per_send and seg.size > 1:
            self._split(seg)
            return StepOutcome.SPLIT

        items = self._plan.items[seg.start:seg.end]
        body = render_payload(items)
        outcome = StepOutcome.EMPTY
        if body.strip():
            text = body
            if not self._intro_sent:
                text = f"{self.settings.intro_banner}\n{body}"
                self._intro_sent = True
            self.outbox.send_op(UserInput(text))
            self.outbox.send_op(Interrupt())
            lines = render_replay_lines(items, hide_seed=self.settings.hide_seed_messages)
            self.outbox.insert_history(*lines, items=items)
            outcome = StepOutcome.SENT

        self._tokens_sent += seg.token_estimate
        self._cursor += 1
        logger.debug(
            "Segment %d/%d [%d:%d) %s, ~%d tokens (%d%%)",
            self._cursor, len(self._segments), seg.start, seg.end,
            outcome.value, seg.token_estimate, self.percent,
        )
        if self._cursor >= len(self._segments):
            self._finish()
        return outcome

    def cancel(self) -> None:
        """Stop the replay. Idempotent; a finished replay is left alone."""
        if self._status is not ReplayStatus.ACTIVE:
            return
        started = self.percent > 0 or self._cursor > 0 or self._intro_sent
        self._status = ReplayStatus.CANCELLED
        if started:
            self.outbox.send_op(Interrupt())
        self.outbox.insert_history("Replay cancelled by user.")
        logger.info(
            "Replay cancelled at segment %d/%d (~%d tokens sent)",
            self._cursor, len(self._segments), self._tokens_sent,
        )

    # -- internals ---------------------------------------------------------

    def _split(self, seg: Segment) -> None:
        items = self._plan.items
        mid = seg.start + seg.size // 2
        left = Segment(seg.start, mid, self.estimator(items[seg.start:mid]))
        right = Segment(mid, seg.end, self.estimator(items[mid:seg.end]))
        self._segments[self._cursor:self._cursor + 1] = [left, right]
        logger.debug(
            "Split segment [%d:%d) ~%d tokens into [%d:%d) ~%d and [%d:%d) ~%d",
            seg.start, seg.end, seg.token_estimate,
            left.start, left.end, left.token_estimate,
            right.start, right.end, right.token_estimate,
        )

    def _finish(self) -> None:
        self._status = ReplayStatus.COMPLETE
        self.outbox.send_op(UserInput(self.settings.end_marker))

        approx_tokens = max(self._tokens_sent, 1)
        self.outbox.insert_history(
            f"Replay complete: {self._cursor}/{len(self._segments)} segments "
            f"(~{approx_tokens} tokens)."
        )
        completion = RestoreCompleted(
            approx_tokens=approx_tokens, segments=self._original_segments,
        )
        self.last_completion = completion
        if self._on_complete is not None:
            self._on_complete(completion)
        self.outbox.send(StopReplayAuto())
        logger.info(
            "Replay complete: %d segments, ~%d tokens", self._cursor, approx_tokens,
        )
