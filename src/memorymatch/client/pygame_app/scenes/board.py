from __future__ import annotations

import pygame  # type: ignore[import-not-found]

from memorymatch.engine.game import Event
from memorymatch.engine.types import Previewing

from ..app import GameContext, SceneTransition
from ..ui import CARD_BACK, MATCHED_BORDER, Button, board_rects, draw_text


class BoardScene:
    def __init__(self, ctx: GameContext, tier: str, time_limit: bool, preview: bool) -> None:
        self.ctx = ctx
        self.tier = tier
        self.time_limit = time_limit
        self.preview = preview
        self._next: SceneTransition | None = None
        self._banner: str | None = None
        self._rects: list[pygame.Rect] = []

        self.btn_menu = Button(rect=pygame.Rect(860, 20, 140, 40), text="Menu", on_click=self._on_menu)
        self.btn_again = Button(rect=pygame.Rect(360, 420, 300, 56), text="Play again", on_click=self._on_again)
        self._unsubscribe = ctx.game.subscribe(self._on_game_event)

    def _on_game_event(self, event: Event) -> None:
        kind = event.get("type")
        if kind == "ROUND_STARTED":
            self._banner = None
            self.ctx.assets.prefetch(sorted({c.face for c in self.ctx.game.state.cards}))
        elif kind == "ROUND_FINISHED":
            if event.get("outcome") == "completed":
                msg = f"You won! Time: {event.get('time')}s  Moves: {event.get('moves')}"
                session = self.ctx.session
                if session is not None and session.last_record:
                    msg += "  New best!"
                self._banner = msg
            else:
                self._banner = "Time's up! Game over."

    def _leave(self) -> None:
        self._unsubscribe()
        if self.ctx.session is not None:
            self.ctx.session.leave()

    def _on_menu(self) -> None:
        from .menu import MenuScene

        self._leave()
        self._next = SceneTransition(
            MenuScene(self.ctx, tier=self.tier, time_limit=self.time_limit, preview=self.preview)
        )

    def _on_again(self) -> None:
        if self.ctx.session is None:
            return
        self._banner = None
        self.ctx.session.begin_round(self.tier, time_limit=self.time_limit, preview=self.preview)

    def handle_event(self, event: pygame.event.Event) -> None:
        if self.btn_menu.handle_event(event):
            return
        if self._banner is not None:
            self.btn_again.handle_event(event)
            return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for i, rect in enumerate(self._rects):
                if rect.collidepoint(event.pos):
                    self.ctx.game.flip(i)
                    return

    def update(self, dt: float) -> SceneTransition | None:
        return self._next

    def render(self, screen: pygame.Surface) -> None:
        screen.fill((12, 12, 18))
        fonts = self.ctx.assets.fonts
        state = self.ctx.game.state
        self.btn_menu.draw(screen, fonts.ui)

        session = self.ctx.session
        if session is not None and session.last_error:
            draw_text(screen, fonts.ui, f"Could not start: {session.last_error}", (20, 80), color=(240, 80, 80))
            return
        if state.config is None:
            draw_text(screen, fonts.ui, "Loading images...", (20, 80))
            return

        hud = f"Moves: {state.moves}    Time: {state.elapsed}s"
        if state.config.time_limit:
            hud += f" / {state.config.time_limit_seconds}s"
        draw_text(screen, fonts.big, hud, (20, 24))
        if isinstance(state.turn, Previewing):
            draw_text(screen, fonts.ui, "Memorize the cards...", (520, 32))

        area = pygame.Rect(20, 80, screen.get_width() - 40, screen.get_height() - 100)
        self._rects = board_rects(area, len(state.cards), state.config.columns)
        for card, rect in zip(state.cards, self._rects):
            if card.revealed:
                screen.blit(self.ctx.assets.get_image(card.face, rect.size), rect.topleft)
                if card.matched:
                    pygame.draw.rect(screen, MATCHED_BORDER, rect, width=3, border_radius=4)
            else:
                pygame.draw.rect(screen, CARD_BACK, rect, border_radius=6)
                pygame.draw.rect(screen, (0, 0, 0), rect, width=2, border_radius=6)

        if self._banner is not None:
            overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
            overlay.fill((0, 0, 0, 170))
            screen.blit(overlay, (0, 0))
            img = fonts.big.render(self._banner, True, (240, 240, 240))
            screen.blit(img, img.get_rect(center=(screen.get_width() // 2, 360)).topleft)
            self.btn_again.draw(screen, fonts.ui)
