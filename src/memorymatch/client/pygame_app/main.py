from __future__ import annotations

import argparse
import logging

import pygame  # type: ignore[import-not-found]

from memorymatch.engine.game import MemoryGame
from memorymatch.engine.scheduler import Scheduler
from memorymatch.paths import get_paths
from memorymatch.services.content import ContentService
from memorymatch.services.storage import JsonStore
from memorymatch.services.telemetry import TelemetryService

from .app import App, GameContext
from .asset_manager import AssetManager
from .scenes.boot import BootScene


def main() -> int:
    parser = argparse.ArgumentParser(prog="memorymatch")
    parser.add_argument("--width", type=int, default=1024)
    parser.add_argument("--height", type=int, default=768)
    parser.add_argument("--userdata", default=None, help="directory for scores, image cache and telemetry")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    pygame.init()
    screen = pygame.display.set_mode((args.width, args.height))
    pygame.display.set_caption("Memory Match")

    clock = pygame.time.Clock()
    paths = get_paths(args.userdata)

    scheduler = Scheduler()
    game = MemoryGame(scheduler)
    telemetry = TelemetryService(paths.telemetry_path)
    game.subscribe(telemetry.on_game_event)

    ctx = GameContext(
        screen=screen,
        clock=clock,
        paths=paths,
        assets=AssetManager(),
        content=ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir),
        store=JsonStore(paths.store_path),
        telemetry=telemetry,
        scheduler=scheduler,
        game=game,
    )

    app = App(ctx, BootScene(ctx))
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
