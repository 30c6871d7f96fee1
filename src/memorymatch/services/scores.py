from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from memorymatch.engine.types import TIERS

from .content import schema_errors
from .storage import JsonStore, PersistenceError

SCORES_KEY = "memoryScores"


@dataclass(frozen=True)
class ScoreRecord:
    time: int
    moves: int

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "ScoreRecord":
        t = d.get("time")
        m = d.get("moves")
        if not isinstance(t, int) or not isinstance(m, int):
            raise PersistenceError("Invalid score record")
        return ScoreRecord(time=t, moves=m)

    def to_dict(self) -> dict[str, object]:
        return {"time": self.time, "moves": self.moves}


class ScoreLedger:
    """Best (lowest-time) completed round per difficulty tier.

    A tier's record is only replaced by a strictly faster time; move count is
    stored for display but never breaks a tie.
    """

    def __init__(self, store: JsonStore, schema: object | None = None) -> None:
        self._store = store
        self._schema = schema

    def _load(self) -> dict[str, ScoreRecord | None]:
        raw = self._store.get(SCORES_KEY)
        table: dict[str, ScoreRecord | None] = {tier: None for tier in TIERS}
        if raw is None:
            return table
        if not isinstance(raw, dict):
            raise PersistenceError("Score table must be an object")
        if self._schema is not None:
            errors = schema_errors(raw, self._schema)
            if errors:
                raise PersistenceError("\n".join(["Score table failed validation:", *errors]))
        for tier in TIERS:
            rec = raw.get(tier)
            if isinstance(rec, dict):
                table[tier] = ScoreRecord.from_dict(rec)
        return table

    def _save(self, table: Mapping[str, ScoreRecord | None]) -> None:
        self._store.set(
            SCORES_KEY,
            {tier: (rec.to_dict() if rec is not None else None) for tier, rec in table.items()},
        )

    def get_best(self, tier: str) -> ScoreRecord | None:
        return self._load().get(tier)

    def all_bests(self) -> dict[str, ScoreRecord | None]:
        return self._load()

    def record_if_better(self, tier: str, time: int, moves: int) -> bool:
        if tier not in TIERS:
            raise ValueError(f"Unknown tier: {tier}")
        table = self._load()
        current = table.get(tier)
        if current is not None and time >= current.time:
            return False
        table[tier] = ScoreRecord(time=time, moves=moves)
        self._save(table)
        return True
