from __future__ import annotations

import logging
import random
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass

from memorymatch.engine.deck import ConfigurationError, build_deck
from memorymatch.engine.game import Event, MemoryGame
from memorymatch.engine.types import RoundConfig

from .content import DifficultyCatalog
from .images import ImageProvider
from .scores import ScoreLedger
from .storage import PersistenceError

logger = logging.getLogger(__name__)


@dataclass
class PendingRound:
    config: RoundConfig
    future: Future[list[str]]


class SessionController:
    """Difficulty selection, image acquisition and round lifecycle.

    Images are memoized per pair count. `begin_round` fetches them on a worker
    thread; `poll` must be called from the thread that owns the game (the host
    loop) and starts the round once they are available.
    """

    def __init__(
        self,
        game: MemoryGame,
        images: ImageProvider,
        ledger: ScoreLedger,
        difficulties: DifficultyCatalog,
        rng: random.Random | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.game = game
        self.images = images
        self.ledger = ledger
        self.difficulties = difficulties
        self.rng = rng or random.Random()
        self._executor = executor
        self._image_cache: dict[int, list[str]] = {}
        self._pending: PendingRound | None = None
        self.last_error: str | None = None
        self.last_record: bool | None = None
        game.subscribe(self._on_game_event)

    # -------- Configuration --------
    def config_for(self, tier: str, *, time_limit: bool = False, preview: bool = False) -> RoundConfig:
        return self.difficulties.round_config(tier, time_limit=time_limit, preview=preview)

    def images_for(self, pairs: int) -> list[str]:
        cached = self._image_cache.get(pairs)
        if cached is None:
            cached = self.images.fetch_images(pairs)
            self._image_cache[pairs] = list(cached)
        return list(cached)

    # -------- Round lifecycle --------
    def start_round(self, tier: str, *, time_limit: bool = False, preview: bool = False) -> RoundConfig:
        self._pending = None
        try:
            config = self.config_for(tier, time_limit=time_limit, preview=preview)
        except ConfigurationError:
            self.game.reset()
            raise
        self._launch(config, self.images_for(config.pairs))
        return config

    def begin_round(self, tier: str, *, time_limit: bool = False, preview: bool = False) -> Future[list[str]]:
        """Start fetching images in the background; `poll()` starts the round."""
        self._pending = None
        self.last_error = None
        self.game.reset()
        config = self.config_for(tier, time_limit=time_limit, preview=preview)
        cached = self._image_cache.get(config.pairs)
        if cached is not None:
            future: Future[list[str]] = Future()
            future.set_result(list(cached))
        else:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="memorymatch-images")
            future = self._executor.submit(self.images.fetch_images, config.pairs)
        self._pending = PendingRound(config=config, future=future)
        return future

    @property
    def loading(self) -> bool:
        return self._pending is not None

    def poll(self) -> bool:
        """Start the pending round if its images are ready. Returns True when started."""
        pending = self._pending
        if pending is None or not pending.future.done():
            return False
        self._pending = None
        if pending.future.cancelled():
            return False
        try:
            images = pending.future.result()
        except Exception as e:
            self.last_error = f"Could not load images: {e}"
            logger.exception("Image fetch failed")
            return False
        try:
            self._launch(pending.config, images)
        except ConfigurationError as e:
            self.last_error = str(e)
            logger.error("Round not started: %s", e)
            return False
        self._image_cache.setdefault(pending.config.pairs, list(images))
        return True

    def _launch(self, config: RoundConfig, images: list[str]) -> None:
        self.last_error = None
        self.last_record = None
        try:
            deck = build_deck(images, config.pairs, self.rng)
        except ConfigurationError:
            self.game.reset()
            raise
        self.game.start(deck, config)

    def leave(self) -> None:
        """Navigation away from the board: drop pending work and stop the round."""
        self._pending = None
        self.game.reset()

    def shutdown(self) -> None:
        self.leave()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    # -------- Scores --------
    def _on_game_event(self, event: Event) -> None:
        if event.get("type") != "ROUND_COMPLETED":
            return
        tier = str(event["tier"])
        time = int(event["time"])  # type: ignore[call-overload]
        moves = int(event["moves"])  # type: ignore[call-overload]
        try:
            self.last_record = self.ledger.record_if_better(tier, time, moves)
        except PersistenceError as e:
            self.last_record = False
            logger.warning("Could not save score for %s: %s", tier, e)
