from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from memorymatch.engine.deck import ConfigurationError
from memorymatch.engine.types import RoundConfig, Tier


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def schema_errors(instance: object, schema: object) -> list[str]:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
    out: list[str] = []
    for err in errors[:10]:
        loc = "/".join(str(p) for p in err.absolute_path)
        out.append(f"- {loc}: {err.message}")
    return out


def validate_json(instance: object, schema: object, *, context: str) -> None:
    errors = schema_errors(instance, schema)
    if errors:
        raise ContentError("\n".join([f"Schema validation failed for {context}:", *errors]))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


@dataclass(frozen=True)
class Difficulty:
    id: Tier
    label: str
    pairs: int
    columns: int


@dataclass(frozen=True)
class DifficultyCatalog:
    """Tier id -> board size, in display order."""

    tiers: dict[str, Difficulty]

    def get(self, tier: str) -> Difficulty:
        try:
            return self.tiers[tier]
        except KeyError:
            raise ConfigurationError(f"Unknown difficulty: {tier}") from None

    def ids(self) -> list[str]:
        return list(self.tiers.keys())

    def round_config(self, tier: str, *, time_limit: bool = False, preview: bool = False) -> RoundConfig:
        d = self.get(tier)
        return RoundConfig(
            tier=d.id,
            pairs=d.pairs,
            columns=d.columns,
            time_limit=time_limit,
            preview=preview,
        )


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_schema(self, name: str) -> object:
        return _load_json(self._schema_dir / f"{name}.schema.json")

    def load_difficulties(self) -> DifficultyCatalog:
        path = self._data_dir / "difficulties.json"
        raw = _load_json(path)
        validate_json(raw, self.load_schema("difficulties"), context=str(path))
        if not isinstance(raw, dict):
            raise ContentError("difficulties.json must be an object")
        raw_tiers = raw.get("tiers")
        if not isinstance(raw_tiers, list):
            raise ContentError("difficulties.json.tiers must be a list")

        tiers: dict[str, Difficulty] = {}
        for item in raw_tiers:
            if not isinstance(item, dict):
                continue
            d = Difficulty(
                id=_require_str(item, "id"),  # type: ignore[arg-type]
                label=_require_str(item, "label"),
                pairs=_require_int(item, "pairs"),
                columns=_require_int(item, "columns"),
            )
            if d.id in tiers:
                raise ContentError(f"Duplicate difficulty id: {d.id}")
            tiers[d.id] = d
        return DifficultyCatalog(tiers=tiers)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_difficulties()
        _ = self.load_schema("scores")
