from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)

# Game events worth keeping; per-flip and per-tick events are too chatty.
ROUND_EVENTS = frozenset({"ROUND_STARTED", "ROUND_COMPLETED", "ROUND_TIMED_OUT", "ROUND_RESET"})


@dataclass
class TelemetryService:
    path: Path
    event_types: frozenset[str] = field(default=ROUND_EVENTS)

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def on_game_event(self, event: Mapping[str, object]) -> None:
        """Game listener: records round lifecycle events."""
        event_type = str(event.get("type", ""))
        if event_type not in self.event_types:
            return
        try:
            self.log(event_type, {k: v for k, v in event.items() if k != "type"})
        except OSError as e:
            logger.warning("Telemetry write failed: %s", e)
