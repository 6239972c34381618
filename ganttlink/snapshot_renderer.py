from __future__ import annotations

import math
from dataclasses import dataclass

from .graph import RelationshipSource, as_index
from .resolver import ResolverConfig
from .schema import Task
from .store import PositionStore
from .validation import find_constraint_violations

BAR_FILL = "#"
LOCKED_FILL = "="


@dataclass(frozen=True)
class SnapshotRenderConfig:
    pixels_per_column: float = 10.0
    show_dependency_lines: bool = True
    label_width: int = 0

    def __post_init__(self) -> None:
        if self.pixels_per_column <= 0:
            raise ValueError("pixels_per_column must be > 0")
        if self.label_width < 0:
            raise ValueError("label_width must be >= 0")


def render_schedule_ascii(
    store: PositionStore,
    relationships: RelationshipSource,
    task_ids: tuple[str, ...] | None = None,
    config: SnapshotRenderConfig | None = None,
    resolver_config: ResolverConfig | None = None,
) -> str:
    cfg = config or SnapshotRenderConfig()
    index = as_index(relationships)
    tasks = ordered_tasks(store, task_ids)

    lines: list[str] = ["Schedule snapshot"]
    if not tasks:
        lines.append("  (no tasks)")
        return "\n".join(lines) + "\n"

    origin = min(0.0, min(task.bar.x for task in tasks))
    columns = max(_column(task.bar.x + task.bar.width, origin, cfg) for task in tasks) + 1
    label_width = max(cfg.label_width, max(len(task.task_id) for task in tasks))

    lines.append(f"Origin: x={origin:g} | px/column={cfg.pixels_per_column:g} | columns={columns}")
    lines.append(" " * (label_width + 1) + "|" + _build_ruler(columns) + "|")
    for task in tasks:
        bar = _render_bar(task, origin, columns, cfg)
        flags = f"x={task.bar.x:g} w={task.bar.width:g}"
        if task.locked:
            flags = f"{flags} locked"
        lines.append(f"{task.task_id.ljust(label_width)} |{bar}| {flags}")

    if cfg.show_dependency_lines:
        lines.append("")
        lines.append("Dependency links:")
        violated = {v.relationship for v in find_constraint_violations(store, index, resolver_config)}
        if not index.relationships:
            lines.append("  (none)")
        for rel in index.relationships:
            lag = "default" if rel.lag is None else f"{rel.lag:g}"
            link = "elastic" if rel.elastic else "fixed"
            marker = "violated" if rel in violated else "ok"
            lines.append(
                f"  {rel.predecessor_id:>6} -> {rel.successor_id:<6} {rel.dependency_type:<2} lag={lag} {link} {marker}"
            )

    return "\n".join(lines) + "\n"


def ordered_tasks(store: PositionStore, task_ids: tuple[str, ...] | None = None) -> list[Task]:
    candidates = store.task_ids() if task_ids is None else task_ids
    tasks = [task for task in (store.get_task(task_id) for task_id in candidates) if task is not None]
    return sorted(tasks, key=lambda t: (t.bar.y, t.bar.x, t.task_id))


def _column(px: float, origin: float, cfg: SnapshotRenderConfig) -> int:
    return int(math.floor((px - origin) / cfg.pixels_per_column))


def _render_bar(task: Task, origin: float, columns: int, cfg: SnapshotRenderConfig) -> str:
    cells = [" "] * columns
    fill = LOCKED_FILL if task.locked else BAR_FILL
    start = _column(task.bar.x, origin, cfg)
    end = max(start, _column(task.bar.x + task.bar.width, origin, cfg) - 1)
    for col in range(start, end + 1):
        if 0 <= col < columns:
            cells[col] = fill
    return "".join(cells)


def _build_ruler(columns: int) -> str:
    return "".join("|" if col % 10 == 0 else "." for col in range(columns))
