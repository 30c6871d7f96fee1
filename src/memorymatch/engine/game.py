from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Sequence

from .deck import ConfigurationError
from .scheduler import ScheduledTask, Scheduler
from .timer import RoundTimer
from .types import (
    AwaitingFirstFlip,
    AwaitingSecondFlip,
    Card,
    Finished,
    FinishReason,
    Idle,
    Previewing,
    Resolving,
    RoundConfig,
    TurnState,
    accepts_flips,
)

Event = dict[str, object]
Listener = Callable[[Event], None]


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


@dataclass
class RoundState:
    config: RoundConfig | None = None
    cards: list[Card] = field(default_factory=list)
    turn: TurnState = field(default_factory=Idle)
    moves: int = 0
    elapsed: int = 0
    matched_pairs: int = 0
    event_log: list[Event] = field(default_factory=list)

    @property
    def total_pairs(self) -> int:
        return len(self.cards) // 2

    @property
    def locked(self) -> bool:
        return not accepts_flips(self.turn)

    @property
    def finished(self) -> bool:
        return isinstance(self.turn, Finished)


class MemoryGame:
    """Turn, lock and timing rules for one board at a time.

    Every deferred action (timer ticks, hiding a missed pair, ending the preview,
    finish notifications) is scheduled through `_defer` and tagged with the
    round generation. `reset()` cancels them all and bumps the generation, so a
    callback left over from a previous round never touches the current one.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self.scheduler = scheduler
        self.state = RoundState()
        self.generation = 0
        self._timer = RoundTimer(scheduler)
        self._deferred: list[ScheduledTask] = []
        self._listeners: list[Listener] = []

    # -------- Listeners --------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event_type: str, **payload: object) -> Event:
        event: Event = {"type": event_type, **payload}
        self.state.event_log.append(event)
        for listener in list(self._listeners):
            listener(event)
        return event

    # -------- Deferred work --------
    def _defer(self, delay: float, action: Callable[[], None]) -> None:
        generation = self.generation

        def fire() -> None:
            if generation != self.generation:
                return
            action()

        self._deferred = [t for t in self._deferred if t.active]
        self._deferred.append(self.scheduler.call_later(delay, fire))

    def _cancel_deferred(self) -> None:
        for task in self._deferred:
            task.cancel()
        self._deferred = []

    # -------- Lifecycle --------
    def reset(self) -> None:
        self.generation += 1
        self._cancel_deferred()
        self._timer.stop()
        had_round = self.state.config is not None
        self.state = RoundState()
        if had_round:
            self._emit("ROUND_RESET", generation=self.generation)

    def start(self, deck: Sequence[Card], config: RoundConfig) -> None:
        self.reset()
        if len(deck) != config.pairs * 2:
            raise ConfigurationError(f"Deck must be exactly {config.pairs * 2} cards.")
        self.state = RoundState(config=config, cards=list(deck))
        self._emit(
            "ROUND_STARTED",
            tier=config.tier,
            pairs=config.pairs,
            columns=config.columns,
            time_limit=config.time_limit,
            preview=config.preview,
        )
        if config.preview:
            for card in self.state.cards:
                card.revealed = True
            self.state.turn = Previewing()
            self._emit("PREVIEW_STARTED", seconds=config.preview_seconds)
            self._defer(config.preview_seconds, self._end_preview)
        else:
            self._begin_play()

    def _end_preview(self) -> None:
        if not isinstance(self.state.turn, Previewing):
            return
        for card in self.state.cards:
            card.revealed = False
        self._emit("PREVIEW_ENDED")
        self._begin_play()

    def _begin_play(self) -> None:
        self.state.turn = AwaitingFirstFlip()
        generation = self.generation

        def on_tick(elapsed: int) -> None:
            if generation == self.generation:
                self._on_tick(elapsed)

        self._timer.start(on_tick)

    # -------- Input --------
    def flip(self, index: int) -> StepResult:
        """Reveal the card at `index`.

        Requests that cannot apply right now (board locked, card already face up,
        round over) are ignored and reported with ok=False; they never raise.
        """
        state = self.state
        if index < 0 or index >= len(state.cards):
            return StepResult(ok=False, events=[], error="Invalid card index.")
        if state.finished:
            return StepResult(ok=False, events=[], error="Round already finished.")
        if state.locked:
            return StepResult(ok=False, events=[], error="Board is locked.")
        card = state.cards[index]
        if card.revealed or card.matched:
            return StepResult(ok=False, events=[], error="Card is already face up.")

        before = len(state.event_log)
        card.revealed = True
        self._emit("CARD_REVEALED", index=index)

        turn = state.turn
        if isinstance(turn, AwaitingFirstFlip):
            state.turn = AwaitingSecondFlip(first=index)
        elif isinstance(turn, AwaitingSecondFlip):
            state.moves += 1
            self._emit("MOVES_CHANGED", moves=state.moves)
            self._resolve(turn.first, index)
        return StepResult(ok=True, events=state.event_log[before:])

    def _resolve(self, first_index: int, second_index: int) -> None:
        state = self.state
        first = state.cards[first_index]
        second = state.cards[second_index]
        if first.face == second.face:
            first.matched = True
            second.matched = True
            state.matched_pairs += 1
            self._emit("PAIR_MATCHED", first=first_index, second=second_index, matched_pairs=state.matched_pairs)
            if state.matched_pairs == state.total_pairs:
                self._complete()
            else:
                state.turn = AwaitingFirstFlip()
            return

        state.turn = Resolving(first=first_index, second=second_index)
        self._emit("PAIR_MISSED", first=first_index, second=second_index)
        assert state.config is not None
        self._defer(state.config.mismatch_delay, self._hide_missed_pair)

    def _hide_missed_pair(self) -> None:
        turn = self.state.turn
        if not isinstance(turn, Resolving):
            return
        for i in (turn.first, turn.second):
            self.state.cards[i].revealed = False
        self.state.turn = AwaitingFirstFlip()
        self._emit("CARDS_HIDDEN", indices=[turn.first, turn.second])

    # -------- Timing --------
    def _on_tick(self, elapsed: int) -> None:
        state = self.state
        if state.finished:
            return
        state.elapsed = elapsed
        self._emit("TIME_CHANGED", elapsed=elapsed)
        cfg = state.config
        if cfg is not None and cfg.time_limit and elapsed >= cfg.time_limit_seconds:
            self._time_out()

    def _complete(self) -> None:
        state = self.state
        assert state.config is not None
        self._timer.stop()
        state.turn = Finished(reason="completed")
        self._emit("ROUND_COMPLETED", tier=state.config.tier, time=state.elapsed, moves=state.moves)
        self._defer(state.config.finish_notify_delay, lambda: self._notify_finished("completed"))

    def _time_out(self) -> None:
        state = self.state
        assert state.config is not None
        self._timer.stop()
        self._cancel_deferred()
        for card in state.cards:
            card.revealed = False
        state.turn = Finished(reason="timed_out")
        self._emit("ROUND_TIMED_OUT", tier=state.config.tier, time=state.elapsed, moves=state.moves)
        self._defer(state.config.timeout_notify_delay, lambda: self._notify_finished("timed_out"))

    def _notify_finished(self, outcome: FinishReason) -> None:
        self._emit("ROUND_FINISHED", outcome=outcome, time=self.state.elapsed, moves=self.state.moves)
