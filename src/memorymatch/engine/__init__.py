"""Headless rules engine for memorymatch.

IMPORTANT: This package must never import pygame.
"""

from .deck import ConfigurationError, build_deck
from .game import MemoryGame, RoundState, StepResult
from .scheduler import ScheduledTask, Scheduler
from .timer import RoundTimer
from .types import (
    TIERS,
    AwaitingFirstFlip,
    AwaitingSecondFlip,
    Card,
    Finished,
    Idle,
    Previewing,
    Resolving,
    RoundConfig,
    Tier,
    TurnState,
)

__all__ = [
    "AwaitingFirstFlip",
    "AwaitingSecondFlip",
    "Card",
    "ConfigurationError",
    "Finished",
    "Idle",
    "MemoryGame",
    "Previewing",
    "Resolving",
    "RoundConfig",
    "RoundState",
    "RoundTimer",
    "ScheduledTask",
    "Scheduler",
    "StepResult",
    "TIERS",
    "Tier",
    "TurnState",
    "build_deck",
]
