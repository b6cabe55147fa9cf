"""Telemetry logging for formatter runs.

Writes one JSON object per line to an append-only file. RunTelemetry ties
the events of one ``midlfmt format`` invocation together under a run id.

Events:
- run_started: paths, files, mode
- file_formatted: path, changed, input_bytes, output_bytes, duration_s
- file_failed: path, stage ("read" or "write"), error
- run_completed: files, changed, failed
"""

from __future__ import annotations

import json
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import TelemetryConfig


@dataclass(frozen=True)
class TelemetrySink:
    """Thin wrapper around JSONL telemetry.

    Event schema:
      {"timestamp": <float>, "run_id": <str>, "type": <str>, "data": <object>}
    """

    enabled: bool
    path: Path

    def log(self, run_id: str, event_type: str, data: dict[str, Any]) -> None:
        if not self.enabled:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        entry = {
            "timestamp": time.time(),
            "run_id": run_id,
            "type": event_type,
            "data": data,
        }

        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class RunTelemetry:
    """Events of a single format run, all logged under one run id."""

    sink: TelemetrySink
    run_id: str = field(default_factory=new_run_id)

    @classmethod
    def from_config(cls, config: TelemetryConfig) -> RunTelemetry:
        """Prune an expired log, then open a sink at the configured path."""
        path = Path(config.log_path)
        if config.enabled:
            prune_telemetry_file(path, config.retention_days)
        return cls(TelemetrySink(enabled=config.enabled, path=path))

    def run_started(self, paths: Sequence[str], files: int, mode: str) -> None:
        self.sink.log(self.run_id, "run_started", {"paths": list(paths), "files": files, "mode": mode})

    def file_formatted(self, path: Path, original: str, formatted: str, started: float) -> None:
        self.sink.log(
            self.run_id,
            "file_formatted",
            {
                "path": str(path),
                "changed": formatted != original,
                "input_bytes": len(original.encode("utf-8")),
                "output_bytes": len(formatted.encode("utf-8")),
                "duration_s": time.time() - started,
            },
        )

    def file_failed(self, path: Path, stage: str, error: Exception) -> None:
        self.sink.log(self.run_id, "file_failed", {"path": str(path), "stage": stage, "error": str(error)})

    def run_completed(self, files: int, changed: int, failed: int) -> None:
        self.sink.log(self.run_id, "run_completed", {"files": files, "changed": changed, "failed": failed})


def prune_telemetry_file(telemetry_path: Path, retention_days: int) -> None:
    """Delete telemetry file if it is older than retention_days (mtime-based)."""
    if retention_days <= 0:
        return
    try:
        if not telemetry_path.exists():
            return
        cutoff = time.time() - (retention_days * 86400)
        if telemetry_path.stat().st_mtime < cutoff:
            telemetry_path.unlink(missing_ok=True)
    except OSError:
        # Best-effort; telemetry should never fail a formatting run.
        return


def read_events(telemetry_path: Path) -> list[dict[str, Any]]:
    """Read back logged events, skipping lines that are not valid JSON."""
    if not telemetry_path.exists():
        return []
    events: list[dict[str, Any]] = []
    with open(telemetry_path, encoding="utf-8") as f:
        for ln in f:
            ln = ln.strip()
            if not ln:
                continue
            try:
                events.append(json.loads(ln))
            except json.JSONDecodeError:
                continue
    return events
