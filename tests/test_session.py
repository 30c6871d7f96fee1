from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from memorymatch.engine.deck import ConfigurationError
from memorymatch.engine.game import MemoryGame
from memorymatch.engine.scheduler import Scheduler
from memorymatch.engine.types import AwaitingFirstFlip, Finished, Idle, Previewing
from memorymatch.services.content import Difficulty, DifficultyCatalog
from memorymatch.services.scores import ScoreLedger
from memorymatch.services.session import SessionController
from memorymatch.services.storage import JsonStore, PersistenceError

CATALOG = DifficultyCatalog(
    tiers={
        "easy": Difficulty(id="easy", label="Easy", pairs=2, columns=2),
        "medium": Difficulty(id="medium", label="Medium", pairs=3, columns=3),
    }
)


class FakeImages:
    def __init__(self, short: bool = False) -> None:
        self.short = short
        self.calls: list[int] = []

    def fetch_images(self, count: int) -> list[str]:
        self.calls.append(count)
        n = count - 1 if self.short else count
        return [f"img-{i}" for i in range(n)]


class RecordingLedger:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, int, int]] = []

    def record_if_better(self, tier: str, time: int, moves: int) -> bool:
        self.calls.append((tier, time, moves))
        if self.fail:
            raise PersistenceError("disk full")
        return True


def _controller(
    images: FakeImages | None = None,
    ledger: object | None = None,
    executor: ThreadPoolExecutor | None = None,
) -> tuple[SessionController, Scheduler]:
    scheduler = Scheduler()
    game = MemoryGame(scheduler)
    controller = SessionController(
        game=game,
        images=images or FakeImages(),  # type: ignore[arg-type]
        ledger=ledger or RecordingLedger(),  # type: ignore[arg-type]
        difficulties=CATALOG,
        rng=random.Random(1),
        executor=executor,
    )
    return controller, scheduler


def _solve(game: MemoryGame) -> None:
    by_face: dict[str, list[int]] = {}
    for c in game.state.cards:
        by_face.setdefault(c.face, []).append(c.index)
    for a, b in by_face.values():
        game.flip(a)
        game.flip(b)


def test_start_round_builds_board_from_tier() -> None:
    controller, _ = _controller()
    cfg = controller.start_round("medium", time_limit=True)
    state = controller.game.state
    assert (cfg.pairs, cfg.columns, cfg.time_limit, cfg.preview) == (3, 3, True, False)
    assert len(state.cards) == 6
    assert isinstance(state.turn, AwaitingFirstFlip)


def test_images_are_cached_per_pair_count() -> None:
    images = FakeImages()
    controller, _ = _controller(images=images)
    controller.start_round("easy")
    controller.start_round("easy")
    controller.start_round("medium")
    assert images.calls == [2, 3]


def test_completion_records_score_once() -> None:
    ledger = RecordingLedger()
    controller, scheduler = _controller(ledger=ledger)
    controller.start_round("easy")
    scheduler.advance(7.0)
    _solve(controller.game)

    assert controller.game.state.turn == Finished(reason="completed")
    assert ledger.calls == [("easy", 7, 2)]
    assert controller.last_record is True
    scheduler.advance(1.0)
    assert ledger.calls == [("easy", 7, 2)]


def test_timeout_records_nothing() -> None:
    ledger = RecordingLedger()
    controller, scheduler = _controller(ledger=ledger)
    controller.start_round("easy", time_limit=True)
    scheduler.advance(61.0)
    assert controller.game.state.turn == Finished(reason="timed_out")
    assert ledger.calls == []


def test_persistence_failure_does_not_block_finish_notification() -> None:
    ledger = RecordingLedger(fail=True)
    controller, scheduler = _controller(ledger=ledger)
    seen: list[dict[str, object]] = []
    controller.game.subscribe(seen.append)

    controller.start_round("easy")
    _solve(controller.game)
    scheduler.advance(0.3)

    assert ledger.calls == [("easy", 0, 2)]
    assert controller.last_record is False
    assert seen[-1]["type"] == "ROUND_FINISHED"
    assert seen[-1]["outcome"] == "completed"


def test_completion_updates_real_ledger(tmp_path: Path) -> None:
    ledger = ScoreLedger(JsonStore(tmp_path / "store.json"))
    controller, scheduler = _controller(ledger=ledger)
    controller.start_round("easy")
    scheduler.advance(4.0)
    _solve(controller.game)
    best = ledger.get_best("easy")
    assert best is not None and (best.time, best.moves) == (4, 2)


def test_image_shortfall_is_configuration_error_and_leaves_idle() -> None:
    controller, scheduler = _controller(images=FakeImages(short=True))
    with pytest.raises(ConfigurationError):
        controller.start_round("easy")
    assert isinstance(controller.game.state.turn, Idle)
    assert scheduler.pending() == 0


def test_unknown_tier_is_configuration_error() -> None:
    controller, _ = _controller()
    controller.start_round("easy")
    with pytest.raises(ConfigurationError):
        controller.start_round("nightmare")
    assert isinstance(controller.game.state.turn, Idle)


def test_preview_round_locks_input_until_window_ends() -> None:
    controller, scheduler = _controller()
    controller.start_round("easy", preview=True)
    game = controller.game
    assert isinstance(game.state.turn, Previewing)
    assert not game.flip(0).ok
    scheduler.advance(3.0)
    assert isinstance(game.state.turn, AwaitingFirstFlip)
    assert game.flip(0).ok


def test_leave_mid_round_stops_everything() -> None:
    controller, scheduler = _controller()
    controller.start_round("medium")
    game = controller.game
    by_face: dict[str, list[int]] = {}
    for c in game.state.cards:
        by_face.setdefault(c.face, []).append(c.index)
    first, second = list(by_face.values())[:2]
    game.flip(first[0])
    game.flip(second[0])  # mismatch pending

    controller.leave()
    assert isinstance(game.state.turn, Idle)
    assert scheduler.pending() == 0
    scheduler.advance(5.0)
    assert game.state.elapsed == 0
    assert game.state.cards == []


def test_begin_round_starts_on_poll() -> None:
    with ThreadPoolExecutor(max_workers=1) as executor:
        controller, _ = _controller(executor=executor)
        future = controller.begin_round("easy")
        future.result(timeout=5)
        assert controller.loading
        assert isinstance(controller.game.state.turn, Idle)
        assert controller.poll()
    assert not controller.loading
    assert isinstance(controller.game.state.turn, AwaitingFirstFlip)
    assert not controller.poll()


def test_leave_discards_pending_round() -> None:
    controller, _ = _controller()
    controller.start_round("easy")  # warm the cache so begin_round resolves at once
    controller.begin_round("easy")
    controller.leave()
    assert not controller.poll()
    assert isinstance(controller.game.state.turn, Idle)


def test_newer_begin_round_replaces_older() -> None:
    controller, _ = _controller()
    controller.start_round("easy")
    controller.start_round("medium")
    controller.begin_round("easy")
    controller.begin_round("medium")
    assert controller.poll()
    cfg = controller.game.state.config
    assert cfg is not None and cfg.tier == "medium"


def test_rejected_begin_round_drops_earlier_request() -> None:
    controller, scheduler = _controller()
    controller.start_round("easy")
    controller.begin_round("easy")
    with pytest.raises(ConfigurationError):
        controller.begin_round("nightmare")
    assert not controller.loading
    assert not controller.poll()
    assert isinstance(controller.game.state.turn, Idle)
    assert scheduler.pending() == 0


def test_begin_round_shortfall_sets_last_error() -> None:
    with ThreadPoolExecutor(max_workers=1) as executor:
        controller, scheduler = _controller(images=FakeImages(short=True), executor=executor)
        controller.begin_round("easy").result(timeout=5)
        assert not controller.poll()
    assert controller.last_error is not None
    assert not controller.loading
    assert isinstance(controller.game.state.turn, Idle)
    assert scheduler.pending() == 0


class BrokenImages:
    def fetch_images(self, count: int) -> list[str]:
        raise RuntimeError("boom")


def test_failed_image_fetch_is_reported_not_raised() -> None:
    with ThreadPoolExecutor(max_workers=1) as executor:
        controller, scheduler = _controller(images=BrokenImages(), executor=executor)  # type: ignore[arg-type]
        future = controller.begin_round("easy")
        with pytest.raises(RuntimeError):
            future.result(timeout=5)
        assert not controller.poll()
    assert controller.last_error is not None and "boom" in controller.last_error
    assert isinstance(controller.game.state.turn, Idle)
    assert scheduler.pending() == 0

    # The next attempt is not blocked by the failure
    controller.images = FakeImages()  # type: ignore[assignment]
    controller.start_round("easy")
    assert controller.last_error is None
    assert isinstance(controller.game.state.turn, AwaitingFirstFlip)
