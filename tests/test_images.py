from __future__ import annotations

from pathlib import Path

import requests

from memorymatch.services.images import (
    PICSUM_LIST_URL,
    ImageProvider,
    cache_key,
    placeholder_images,
)
from memorymatch.services.storage import JsonStore


class FakeResponse:
    def __init__(self, payload: object, status: int = 200) -> None:
        self.payload = payload
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self) -> object:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, exc: Exception | None = None) -> None:
        self.response = response
        self.exc = exc
        self.calls: list[tuple[str, object]] = []

    def get(self, url: str, params: object = None, timeout: float | None = None) -> FakeResponse:
        self.calls.append((url, params))
        if self.exc is not None:
            raise self.exc
        assert self.response is not None
        return self.response


def _picsum(n: int) -> list[dict[str, object]]:
    return [{"id": str(i), "download_url": f"https://picsum.photos/id/{i}/600/400"} for i in range(n)]


def test_network_result_is_returned_and_cached(tmp_path: Path) -> None:
    store = JsonStore(tmp_path / "store.json")
    session = FakeSession(FakeResponse(_picsum(4)))
    provider = ImageProvider(store, session=session)  # type: ignore[arg-type]

    images = provider.fetch_images(4)
    assert images == [f"https://picsum.photos/id/{i}/600/400" for i in range(4)]
    assert session.calls == [(PICSUM_LIST_URL, {"limit": 4})]
    assert store.get(cache_key(4)) == images

    # Second call served from the store
    assert provider.fetch_images(4) == images
    assert len(session.calls) == 1


def test_network_failure_falls_back_to_placeholders(tmp_path: Path) -> None:
    store = JsonStore(tmp_path / "store.json")
    session = FakeSession(exc=requests.ConnectionError("offline"))
    provider = ImageProvider(store, session=session)  # type: ignore[arg-type]

    images = provider.fetch_images(3)
    assert images == [
        "https://picsum.photos/200?random=1",
        "https://picsum.photos/200?random=2",
        "https://picsum.photos/200?random=3",
    ]
    assert store.get(cache_key(3)) == images


def test_bad_payloads_fall_back(tmp_path: Path) -> None:
    for response in (
        FakeResponse({"error": "nope"}),
        FakeResponse(ValueError("not json")),
        FakeResponse(_picsum(2)),
        FakeResponse(_picsum(5), status=503),
    ):
        store = JsonStore(tmp_path / f"store-{response.status}-{id(response)}.json")
        provider = ImageProvider(store, session=FakeSession(response))  # type: ignore[arg-type]
        assert provider.fetch_images(5) == placeholder_images(5)


def test_unreadable_cache_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("[broken", encoding="utf-8")
    provider = ImageProvider(JsonStore(path), session=FakeSession(FakeResponse(_picsum(2))))  # type: ignore[arg-type]
    assert len(provider.fetch_images(2)) == 2


def test_short_cached_list_is_refetched(tmp_path: Path) -> None:
    store = JsonStore(tmp_path / "store.json")
    store.set(cache_key(3), ["only-one"])
    session = FakeSession(FakeResponse(_picsum(3)))
    provider = ImageProvider(store, session=session)  # type: ignore[arg-type]
    assert len(provider.fetch_images(3)) == 3
    assert len(session.calls) == 1
