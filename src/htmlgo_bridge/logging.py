from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class AttemptTimings:
    build_ms: float = 0.0
    dispatch_ms: float = 0.0
    reconcile_ms: float = 0.0


@dataclass(slots=True)
class AttemptLogEntry:
    attempt_id: str
    direction: str
    environment: str
    status: str
    http_status: int | None
    error_code: str | None
    timings: AttemptTimings
    request_bytes: int
    rewritten: bool = False
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["timings"] = asdict(self.timings)
        return payload


class AttemptLogger:
    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file

    def append(self, entry: AttemptLogEntry) -> None:
        self._log_file.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._log_file.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


def read_entries(log_file: Path) -> list[dict[str, Any]]:
    if not log_file.exists():
        return []
    with log_file.open("r", encoding="utf-8") as handle:
        return [json.loads(line) for line in handle if line.strip()]
