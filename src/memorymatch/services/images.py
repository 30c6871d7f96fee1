from __future__ import annotations

import logging

import requests

from .storage import JsonStore, PersistenceError

logger = logging.getLogger(__name__)

PICSUM_LIST_URL = "https://picsum.photos/v2/list"
PLACEHOLDER_URL = "https://picsum.photos/200?random={i}"


class ProviderError(RuntimeError):
    pass


def cache_key(count: int) -> str:
    return f"memoryImages_{count}"


def placeholder_images(count: int) -> list[str]:
    return [PLACEHOLDER_URL.format(i=i) for i in range(1, count + 1)]


def _valid_image_list(raw: object, count: int) -> bool:
    return (
        isinstance(raw, list)
        and len(raw) == count
        and all(isinstance(x, str) and x for x in raw)
        and len(set(raw)) == count
    )


class ImageProvider:
    """Image URLs for a board: store cache, then Picsum, then placeholders.

    `fetch_images` never fails; cache and network problems are logged and the
    placeholder scheme is used instead.
    """

    def __init__(
        self,
        store: JsonStore,
        session: requests.Session | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._store = store
        self._session = session or requests.Session()
        self._timeout = timeout

    def fetch_images(self, count: int) -> list[str]:
        key = cache_key(count)
        try:
            cached = self._store.get(key)
        except PersistenceError as e:
            logger.warning("Image cache unreadable: %s", e)
            cached = None
        if _valid_image_list(cached, count):
            return list(cached)  # type: ignore[arg-type]

        try:
            images = self.fetch_remote(count)
        except ProviderError as e:
            logger.warning("Image list unavailable, using placeholders: %s", e)
            images = placeholder_images(count)

        try:
            self._store.set(key, images)
        except PersistenceError as e:
            logger.warning("Cannot cache image list: %s", e)
        return images

    def fetch_remote(self, count: int) -> list[str]:
        try:
            resp = self._session.get(PICSUM_LIST_URL, params={"limit": count}, timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(str(e)) from e

        if not isinstance(data, list):
            raise ProviderError("Unexpected image list payload")
        images: list[str] = []
        for item in data:
            url = item.get("download_url") if isinstance(item, dict) else None
            if isinstance(url, str) and url and url not in images:
                images.append(url)
        if len(images) < count:
            raise ProviderError(f"Expected {count} images, got {len(images)}")
        return images[:count]
