from __future__ import annotations

import logging

import pygame  # type: ignore[import-not-found]

from memorymatch.services.scores import ScoreRecord
from memorymatch.services.storage import PersistenceError

from ..app import GameContext, SceneTransition
from ..ui import Button, Toggle, draw_text

logger = logging.getLogger(__name__)


def format_best(label: str, rec: ScoreRecord | None) -> str:
    if rec is None:
        return f"{label}: -"
    return f"{label}: {rec.time}s | {rec.moves} moves"


class MenuScene:
    def __init__(self, ctx: GameContext, tier: str = "medium", time_limit: bool = False, preview: bool = False) -> None:
        self.ctx = ctx
        self._next: SceneTransition | None = None
        assert ctx.difficulties is not None
        ids = ctx.difficulties.ids()
        self.tier = tier if tier in ids else ids[0]
        self.time_limit = time_limit
        self.preview = preview
        self._bests: list[str] = []
        self._build_ui()
        self._refresh_bests()

    def _build_ui(self) -> None:
        assert self.ctx.difficulties is not None
        x, y, w, h, gap = 60, 160, 200, 52, 14
        self._tier_buttons: list[tuple[str, Button]] = []
        for i, tier in enumerate(self.ctx.difficulties.ids()):
            d = self.ctx.difficulties.get(tier)
            btn = Button(
                rect=pygame.Rect(x + i * (w + gap), y, w, h),
                text=f"{d.label} ({d.pairs} pairs)",
                on_click=lambda t=tier: self._select_tier(t),
            )
            self._tier_buttons.append((tier, btn))
        self._sync_tier_buttons()

        self.toggle_limit = Toggle(
            rect=pygame.Rect(x, y + 80, 420, 44),
            label="Time limit (60 seconds)",
            value=self.time_limit,
            on_change=self._on_limit,
        )
        self.toggle_preview = Toggle(
            rect=pygame.Rect(x, y + 134, 420, 44),
            label="Preview cards before play",
            value=self.preview,
            on_change=self._on_preview,
        )
        self.btn_start = Button(rect=pygame.Rect(x, y + 210, 300, 56), text="Start", on_click=self._on_start)
        self.btn_quit = Button(
            rect=pygame.Rect(x, y + 280, 300, 56),
            text="Quit",
            on_click=lambda: pygame.event.post(pygame.event.Event(pygame.QUIT)),
        )

    def _sync_tier_buttons(self) -> None:
        for tier, btn in self._tier_buttons:
            btn.selected = tier == self.tier

    def _select_tier(self, tier: str) -> None:
        self.tier = tier
        self._sync_tier_buttons()

    def _on_limit(self, value: bool) -> None:
        self.time_limit = value

    def _on_preview(self, value: bool) -> None:
        self.preview = value

    def _refresh_bests(self) -> None:
        ledger = self.ctx.ledger
        diffs = self.ctx.difficulties
        if ledger is None or diffs is None:
            return
        try:
            bests = ledger.all_bests()
        except PersistenceError as e:
            logger.warning("Best scores unavailable: %s", e)
            self._bests = ["Best scores unavailable"]
            return
        self._bests = [format_best(diffs.get(t).label, bests.get(t)) for t in diffs.ids()]

    def _on_start(self) -> None:
        from .board import BoardScene

        session = self.ctx.session
        if session is None:
            return
        session.begin_round(self.tier, time_limit=self.time_limit, preview=self.preview)
        self._next = SceneTransition(BoardScene(self.ctx, tier=self.tier, time_limit=self.time_limit, preview=self.preview))

    def handle_event(self, event: pygame.event.Event) -> None:
        for _, b in self._tier_buttons:
            if b.handle_event(event):
                return
        for widget in (self.toggle_limit, self.toggle_preview, self.btn_start, self.btn_quit):
            if widget.handle_event(event):
                return

    def update(self, dt: float) -> SceneTransition | None:
        return self._next

    def render(self, screen: pygame.Surface) -> None:
        screen.fill((12, 12, 18))
        fonts = self.ctx.assets.fonts
        draw_text(screen, fonts.big, "Memory Match", (60, 40))
        draw_text(screen, fonts.ui, "Pick a difficulty, then find every pair.", (60, 100))
        for _, b in self._tier_buttons:
            b.draw(screen, fonts.ui)
        self.toggle_limit.draw(screen, fonts.ui)
        self.toggle_preview.draw(screen, fonts.ui)
        self.btn_start.draw(screen, fonts.ui)
        self.btn_quit.draw(screen, fonts.ui)

        draw_text(screen, fonts.ui, "Best scores", (560, 240))
        for i, line in enumerate(self._bests):
            draw_text(screen, fonts.small, line, (560, 272 + i * 24))
