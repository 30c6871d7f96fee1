from __future__ import annotations

import random
from typing import Sequence

from .types import Card


class ConfigurationError(ValueError):
    pass


def build_deck(images: Sequence[str], pairs: int, rng: random.Random | None = None) -> list[Card]:
    """Lay out two cards per image identifier in shuffled order."""
    if pairs < 1:
        raise ConfigurationError(f"Pair count must be at least 1 (got {pairs}).")
    if len(images) != pairs:
        raise ConfigurationError(f"Expected {pairs} images, got {len(images)}.")
    if len(set(images)) != len(images):
        raise ConfigurationError("Image identifiers must be unique.")

    faces = list(images) * 2
    (rng or random.Random()).shuffle(faces)
    return [Card(index=i, face=face) for i, face in enumerate(faces)]
