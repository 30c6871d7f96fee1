from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Tier = Literal["easy", "medium", "hard"]
FinishReason = Literal["completed", "timed_out"]

TIERS: tuple[Tier, ...] = ("easy", "medium", "hard")


@dataclass
class Card:
    index: int
    face: str
    revealed: bool = False
    matched: bool = False


@dataclass(frozen=True)
class RoundConfig:
    """Immutable settings for a single round, produced at round start."""

    tier: Tier
    pairs: int
    columns: int
    time_limit: bool = False
    preview: bool = False
    time_limit_seconds: int = 60
    mismatch_delay: float = 1.0
    preview_seconds: float = 3.0
    finish_notify_delay: float = 0.3
    timeout_notify_delay: float = 0.2

    @property
    def rows(self) -> int:
        return -(-self.pairs * 2 // self.columns)


# Turn states. Input is accepted only in AwaitingFirstFlip / AwaitingSecondFlip.


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Previewing:
    pass


@dataclass(frozen=True)
class AwaitingFirstFlip:
    pass


@dataclass(frozen=True)
class AwaitingSecondFlip:
    first: int


@dataclass(frozen=True)
class Resolving:
    first: int
    second: int


@dataclass(frozen=True)
class Finished:
    reason: FinishReason


TurnState = Idle | Previewing | AwaitingFirstFlip | AwaitingSecondFlip | Resolving | Finished


def accepts_flips(turn: TurnState) -> bool:
    return isinstance(turn, (AwaitingFirstFlip, AwaitingSecondFlip))


def turn_name(turn: TurnState) -> str:
    return type(turn).__name__
