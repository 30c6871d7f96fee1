from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

USERDATA_ENV = "MEMORYMATCH_USERDATA"


@dataclass(frozen=True)
class Paths:
    repo_root: Path
    data_dir: Path
    schema_dir: Path
    userdata_dir: Path

    @property
    def store_path(self) -> Path:
        return self.userdata_dir / "store.json"

    @property
    def telemetry_path(self) -> Path:
        return self.userdata_dir / "telemetry.jsonl"


def get_paths(userdata_dir: Path | str | None = None) -> Paths:
    # src/memorymatch/paths.py -> parents: [memorymatch, src, repo_root]
    package_dir = Path(__file__).resolve().parent
    repo_root = package_dir.parents[1]
    data_dir = package_dir / "data"
    if userdata_dir is None:
        override = os.environ.get(USERDATA_ENV)
        userdata_dir = Path(override) if override else repo_root / "userdata"
    return Paths(
        repo_root=repo_root,
        data_dir=data_dir,
        schema_dir=data_dir / "schemas",
        userdata_dir=Path(userdata_dir),
    )
