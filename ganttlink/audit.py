from __future__ import annotations

import json
import os
from pathlib import Path
import threading
import time
from typing import Any, Iterator, Mapping

from .schema import Bar
from .store import BatchResolution, Resolution, SingleResolution


def resolution_entry(
    *,
    action: str,
    task_id: str,
    requested: dict[str, float],
    resolution: Resolution | None,
    ts_ns: int | None = None,
) -> dict[str, Any]:
    if resolution is None:
        outcome = "blocked"
        final: dict[str, Any] | list[dict[str, Any]] | None = None
    elif isinstance(resolution, SingleResolution):
        outcome = "single"
        final = {"x": resolution.x, "y": resolution.y}
    elif isinstance(resolution, BatchResolution):
        outcome = "batch"
        final = [{"task_id": u.task_id, "x": u.x, "y": u.y} for u in resolution.updates]
    else:
        raise TypeError(f"Unsupported resolution type: {type(resolution).__name__}")
    return {
        "ts_ns": time.time_ns() if ts_ns is None else ts_ns,
        "action": action,
        "task_id": task_id,
        "outcome": outcome,
        "requested": requested,
        "final": final,
    }


def resize_entry(
    *,
    task_id: str,
    requested_width: float,
    before: Mapping[str, Bar],
    after: Mapping[str, Bar],
    ts_ns: int | None = None,
) -> dict[str, Any]:
    """Audit row for a resize; ``final`` lists every bar whose geometry changed."""
    final = [
        {"task_id": tid, "x": bar.x, "y": bar.y, "width": bar.width}
        for tid, bar in after.items()
        if before.get(tid) != bar
    ]
    return {
        "ts_ns": time.time_ns() if ts_ns is None else ts_ns,
        "action": "resize",
        "task_id": task_id,
        "outcome": "resized" if final else "unchanged",
        "requested": {"width": requested_width},
        "final": final,
    }


class JsonlAuditSink:
    """Append-only JSONL trail of resolution outcomes, one row per move or resize."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def log(self, entry: Mapping[str, Any]) -> None:
        line = json.dumps(dict(entry), separators=(",", ":"), sort_keys=True)
        with self._lock:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")

    def entries(self, *, task_id: str | None = None, action: str | None = None) -> Iterator[dict[str, Any]]:
        """Parsed rows in write order; unreadable lines are skipped."""
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    row = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if not isinstance(row, dict):
                    continue
                if task_id is not None and row.get("task_id") != task_id:
                    continue
                if action is not None and row.get("action") != action:
                    continue
                yield row

    def summarize(self) -> dict[str, Any]:
        by_action: dict[str, int] = {}
        by_outcome: dict[str, int] = {}
        by_task: dict[str, int] = {}
        positions_written = 0
        total = 0
        for row in self.entries():
            total += 1
            for counts, key in ((by_action, "action"), (by_outcome, "outcome"), (by_task, "task_id")):
                value = str(row.get(key, ""))
                counts[value] = counts.get(value, 0) + 1
            final = row.get("final")
            if isinstance(final, list):
                positions_written += len(final)
            elif isinstance(final, dict):
                positions_written += 1
        return {
            "total": total,
            "by_action": by_action,
            "by_outcome": by_outcome,
            "by_task": by_task,
            "positions_written": positions_written,
        }

    def prune(self, *, max_rows: int | None = None) -> int:
        """Keep the newest ``max_rows`` lines; returns how many were dropped."""
        if max_rows is None or max_rows <= 0 or not self.path.exists():
            return 0
        with self._lock:
            rows = [line for line in self.path.read_text(encoding="utf-8").splitlines() if line.strip()]
            dropped = len(rows) - max_rows
            if dropped <= 0:
                return 0
            staging = self.path.with_name(self.path.name + ".tmp")
            staging.write_text("".join(row + "\n" for row in rows[dropped:]), encoding="utf-8")
            os.replace(staging, self.path)
        return dropped
