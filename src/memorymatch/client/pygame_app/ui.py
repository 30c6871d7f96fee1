from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import pygame  # type: ignore[import-not-found]


Color = tuple[int, int, int]

TEXT = (240, 240, 240)
PANEL = (40, 40, 52)
PANEL_OFF = (28, 28, 34)
ACCENT = (90, 140, 220)
CARD_BACK = (52, 84, 150)
MATCHED_BORDER = (90, 200, 120)


def draw_text(
    screen: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: tuple[int, int],
    color: Color = TEXT,
) -> None:
    img = font.render(text, True, color)
    screen.blit(img, pos)


def _clicked(rect: pygame.Rect, event: pygame.event.Event) -> bool:
    return event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and rect.collidepoint(event.pos)


@dataclass
class Button:
    rect: pygame.Rect
    text: str
    on_click: Callable[[], None]
    enabled: bool = True
    selected: bool = False

    def handle_event(self, event: pygame.event.Event) -> bool:
        if self.enabled and _clicked(self.rect, event):
            self.on_click()
            return True
        return False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        bg = ACCENT if self.selected else (PANEL if self.enabled else PANEL_OFF)
        pygame.draw.rect(screen, bg, self.rect, border_radius=8)
        pygame.draw.rect(screen, (0, 0, 0), self.rect, width=2, border_radius=8)
        img = font.render(self.text, True, TEXT)
        screen.blit(img, img.get_rect(center=self.rect.center).topleft)


@dataclass
class Toggle:
    rect: pygame.Rect
    label: str
    value: bool
    on_change: Callable[[bool], None]

    def handle_event(self, event: pygame.event.Event) -> bool:
        if _clicked(self.rect, event):
            self.value = not self.value
            self.on_change(self.value)
            return True
        return False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        pygame.draw.rect(screen, PANEL, self.rect, border_radius=8)
        box = pygame.Rect(self.rect.x + 10, self.rect.centery - 11, 22, 22)
        pygame.draw.rect(screen, TEXT, box, width=2)
        if self.value:
            pygame.draw.rect(screen, ACCENT, box.inflate(-8, -8))
        draw_text(screen, font, self.label, (box.right + 10, self.rect.centery - 8))


def board_rects(area: pygame.Rect, count: int, columns: int, gap: int = 8) -> list[pygame.Rect]:
    """Lay out `count` square-ish card slots in `columns` columns inside `area`."""
    rows = -(-count // columns)
    w = (area.width - gap * (columns - 1)) // columns
    h = (area.height - gap * (rows - 1)) // rows
    side = min(w, int(h / 1.2))
    cw, ch = side, int(side * 1.2)
    x0 = area.x + (area.width - (cw * columns + gap * (columns - 1))) // 2
    y0 = area.y + (area.height - (ch * rows + gap * (rows - 1))) // 2
    return [
        pygame.Rect(x0 + (i % columns) * (cw + gap), y0 + (i // columns) * (ch + gap), cw, ch)
        for i in range(count)
    ]
