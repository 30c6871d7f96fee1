from __future__ import annotations

import io
import logging
import zlib
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

import pygame  # type: ignore[import-not-found]
import requests

logger = logging.getLogger(__name__)


@dataclass
class Fonts:
    ui: pygame.font.Font
    small: pygame.font.Font
    big: pygame.font.Font


class AssetManager:
    """Fonts and card face images.

    Face images are downloaded on worker threads; until a download finishes
    (or if it fails) `get_image` hands out a placeholder surface.
    """

    def __init__(self, session: requests.Session | None = None, timeout: float = 10.0) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._downloads: dict[str, Future[bytes]] = {}
        self._cache: dict[tuple[str, int, int], pygame.Surface] = {}
        self._failed: set[str] = set()
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="memorymatch-assets")

        pygame.font.init()
        self.fonts = Fonts(
            ui=pygame.font.SysFont(None, 24),
            small=pygame.font.SysFont(None, 18),
            big=pygame.font.SysFont(None, 34),
        )

    def _download(self, url: str) -> bytes:
        resp = self._session.get(url, timeout=self._timeout)
        resp.raise_for_status()
        return resp.content

    def prefetch(self, urls: list[str]) -> None:
        for url in urls:
            if url not in self._downloads and url not in self._failed:
                self._downloads[url] = self._executor.submit(self._download, url)

    def get_image(self, url: str, size: tuple[int, int]) -> pygame.Surface:
        key = (url, size[0], size[1])
        if key in self._cache:
            return self._cache[key]
        if url in self._failed:
            self._cache[key] = self._fallback_face(url, size)
            return self._cache[key]

        fut = self._downloads.get(url)
        if fut is None:
            self.prefetch([url])
        elif fut.done():
            try:
                img = pygame.image.load(io.BytesIO(fut.result())).convert()
                img = pygame.transform.smoothscale(img, size)
                self._cache[key] = img
                return img
            except (requests.RequestException, pygame.error) as e:
                logger.warning("Image %s unavailable: %s", url, e)
                self._failed.add(url)
                self._downloads.pop(url, None)
                self._cache[key] = self._fallback_face(url, size)
                return self._cache[key]

        return self._placeholder(size, (70, 70, 90))

    def _placeholder(self, size: tuple[int, int], color: tuple[int, int, int]) -> pygame.Surface:
        surf = pygame.Surface(size)
        surf.fill(color)
        return surf

    def _fallback_face(self, url: str, size: tuple[int, int]) -> pygame.Surface:
        # Faces must stay distinguishable without the picture.
        code = zlib.crc32(url.encode("utf-8"))
        color = (64 + code % 160, 64 + (code >> 8) % 160, 64 + (code >> 16) % 160)
        surf = self._placeholder(size, color)
        label = self.fonts.big.render(str(code % 100), True, (20, 20, 20))
        surf.blit(label, label.get_rect(center=(size[0] // 2, size[1] // 2)))
        return surf

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
