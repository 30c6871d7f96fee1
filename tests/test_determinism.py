from __future__ import annotations

import random
from collections import Counter

import pytest

from memorymatch.engine.deck import ConfigurationError, build_deck
from memorymatch.engine.game import MemoryGame
from memorymatch.engine.scheduler import Scheduler
from memorymatch.engine.serialize import snapshot
from memorymatch.engine.types import RoundConfig


def _images(n: int) -> list[str]:
    return [f"img-{i}" for i in range(n)]


@pytest.mark.parametrize("pairs", [1, 2, 8, 12, 16])
def test_deck_has_each_face_exactly_twice(pairs: int) -> None:
    deck = build_deck(_images(pairs), pairs, random.Random(pairs))
    assert len(deck) == 2 * pairs
    counts = Counter(c.face for c in deck)
    assert len(counts) == pairs
    assert set(counts.values()) == {2}
    assert [c.index for c in deck] == list(range(2 * pairs))
    assert not any(c.revealed or c.matched for c in deck)


def test_deck_rejects_wrong_image_count() -> None:
    with pytest.raises(ConfigurationError):
        build_deck(_images(7), 8)
    with pytest.raises(ConfigurationError):
        build_deck([], 0)


def test_deck_rejects_duplicate_images() -> None:
    with pytest.raises(ConfigurationError):
        build_deck(["a", "a"], 2)


def test_shuffle_is_not_stuck_on_input_order() -> None:
    images = _images(8)
    unshuffled = images * 2
    rng = random.Random(7)
    layouts = {tuple(c.face for c in build_deck(images, 8, rng)) for _ in range(20)}
    assert len(layouts) > 1
    assert tuple(unshuffled) not in layouts


def _play(seed: int, flips: list[int]) -> dict[str, object]:
    scheduler = Scheduler()
    game = MemoryGame(scheduler)
    config = RoundConfig(tier="easy", pairs=8, columns=4)
    game.start(build_deck(_images(8), 8, random.Random(seed)), config)
    for i in flips:
        game.flip(i)
        scheduler.advance(0.6)
    return snapshot(game.state)


def test_same_seed_and_flips_give_same_snapshot() -> None:
    flips = [0, 1, 2, 3, 4, 5, 6, 7, 0, 8, 15, 14]
    snap1 = _play(424242, flips)
    snap2 = _play(424242, flips)
    assert snap1 == snap2
    assert snap1["config"] == {"tier": "easy", "pairs": 8, "columns": 4, "time_limit": False, "preview": False}
