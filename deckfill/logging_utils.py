"""Structured JSONL logging helpers."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def log_event(log_path: Optional[Path], event_type: str, payload: Dict[str, Any]) -> None:
    """Append a structured event to a JSONL log; no-op without a log path."""
    if log_path is None:
        return
    record = {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "event_type": event_type,
        "payload": payload,
    }
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(record, ensure_ascii=True) + "\n")


def read_events(log_path: Path, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
    """Read events back from a JSONL log, optionally filtered by type."""
    if not log_path.exists():
        return []
    events: List[Dict[str, Any]] = []
    with log_path.open("r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line:
                continue
            record = json.loads(line)
            if event_type is None or record.get("event_type") == event_type:
                events.append(record)
    return events
