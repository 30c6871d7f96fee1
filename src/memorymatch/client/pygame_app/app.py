from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import pygame  # type: ignore[import-not-found]

from memorymatch.engine.game import MemoryGame
from memorymatch.engine.scheduler import Scheduler
from memorymatch.paths import Paths
from memorymatch.services.content import ContentService, DifficultyCatalog
from memorymatch.services.images import ImageProvider
from memorymatch.services.scores import ScoreLedger
from memorymatch.services.session import SessionController
from memorymatch.services.storage import JsonStore
from memorymatch.services.telemetry import TelemetryService

from .asset_manager import AssetManager


@dataclass
class SceneTransition:
    next_scene: "Scene"


class Scene(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def update(self, dt: float) -> SceneTransition | None: ...
    def render(self, screen: pygame.Surface) -> None: ...


@dataclass
class GameContext:
    screen: pygame.Surface
    clock: pygame.time.Clock
    paths: Paths
    assets: AssetManager
    content: ContentService
    store: JsonStore
    telemetry: TelemetryService
    scheduler: Scheduler
    game: MemoryGame

    # Loaded at boot
    difficulties: Optional[DifficultyCatalog] = None
    ledger: Optional[ScoreLedger] = None
    images: Optional[ImageProvider] = None
    session: Optional[SessionController] = None


class App:
    def __init__(self, ctx: GameContext, initial_scene: Scene) -> None:
        self.ctx = ctx
        self.scene: Scene = initial_scene
        self.running = True

    def run(self) -> int:
        try:
            while self.running:
                dt = self.ctx.clock.tick(60) / 1000.0
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self.running = False
                        break
                    self.scene.handle_event(event)

                # Deferred game actions and finished image fetches run here,
                # on the same thread as input handling.
                self.ctx.scheduler.advance(dt)
                if self.ctx.session is not None:
                    self.ctx.session.poll()

                tr = self.scene.update(dt)
                if tr is not None:
                    self.scene = tr.next_scene

                self.scene.render(self.ctx.screen)
                pygame.display.flip()
        finally:
            if self.ctx.session is not None:
                self.ctx.session.shutdown()
            self.ctx.assets.shutdown()
        return 0
