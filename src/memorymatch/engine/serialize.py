from __future__ import annotations

from .game import RoundState
from .types import AwaitingSecondFlip, Card, Finished, Resolving, RoundConfig, TurnState, turn_name


def _config_to_dict(cfg: RoundConfig | None) -> dict[str, object] | None:
    if cfg is None:
        return None
    return {
        "tier": cfg.tier,
        "pairs": cfg.pairs,
        "columns": cfg.columns,
        "time_limit": cfg.time_limit,
        "preview": cfg.preview,
    }


def _card_to_dict(c: Card) -> dict[str, object]:
    return {"index": c.index, "face": c.face, "revealed": c.revealed, "matched": c.matched}


def turn_to_dict(t: TurnState) -> dict[str, object]:
    out: dict[str, object] = {"state": turn_name(t)}
    if isinstance(t, AwaitingSecondFlip):
        out["first"] = t.first
    elif isinstance(t, Resolving):
        out["first"] = t.first
        out["second"] = t.second
    elif isinstance(t, Finished):
        out["reason"] = t.reason
    return out


def snapshot(state: RoundState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current round."""
    return {
        "config": _config_to_dict(state.config),
        "turn": turn_to_dict(state.turn),
        "moves": state.moves,
        "elapsed": state.elapsed,
        "matched_pairs": state.matched_pairs,
        "cards": [_card_to_dict(c) for c in state.cards],
    }
