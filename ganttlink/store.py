from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Iterable, Literal, Protocol, TypeAlias

from .schema import Bar, Task


class PositionStore(Protocol):
    def get_task(self, task_id: str) -> Task | None:
        ...

    def task_ids(self) -> tuple[str, ...]:
        ...

    def update_bar_position(
        self,
        task_id: str,
        *,
        x: float | None = None,
        y: float | None = None,
        width: float | None = None,
    ) -> None:
        ...


@dataclass(frozen=True)
class TaskPosition:
    task_id: str
    x: float
    y: float


@dataclass(frozen=True)
class SingleResolution:
    task_id: str
    x: float
    y: float
    kind: Literal["single"] = "single"

    def as_dict(self) -> dict[str, object]:
        return {"type": self.kind, "taskId": self.task_id, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class BatchResolution:
    updates: tuple[TaskPosition, ...]
    kind: Literal["batch"] = "batch"

    def as_dict(self) -> dict[str, object]:
        return {
            "type": self.kind,
            "updates": [{"taskId": u.task_id, "x": u.x, "y": u.y} for u in self.updates],
        }


Resolution: TypeAlias = SingleResolution | BatchResolution


def apply_resolution(store: PositionStore, resolution: Resolution | None) -> None:
    """Write a resolver outcome into ``store``; ``None`` (blocked) writes nothing."""
    if resolution is None:
        return
    if isinstance(resolution, SingleResolution):
        store.update_bar_position(resolution.task_id, x=resolution.x, y=resolution.y)
        return
    for update in resolution.updates:
        store.update_bar_position(update.task_id, x=update.x, y=update.y)


class InMemoryTaskStore:
    """Dict-backed :class:`PositionStore` used by the CLI, the demo and the tests."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: dict[str, Task] = {}
        for task in tasks:
            if task.task_id in self._tasks:
                raise ValueError(f"Duplicate task id `{task.task_id}`")
            self._tasks[task.task_id] = task
        self._write_count = 0

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def update_bar_position(
        self,
        task_id: str,
        *,
        x: float | None = None,
        y: float | None = None,
        width: float | None = None,
    ) -> None:
        task = self._tasks.get(task_id)
        if task is None:
            raise KeyError(task_id)
        changes: dict[str, float] = {}
        if x is not None:
            changes["x"] = x
        if y is not None:
            changes["y"] = y
        if width is not None:
            changes["width"] = width
        if not changes:
            return
        self._tasks[task_id] = dataclasses.replace(task, bar=dataclasses.replace(task.bar, **changes))
        self._write_count += 1

    @property
    def write_count(self) -> int:
        return self._write_count

    def task_ids(self) -> tuple[str, ...]:
        return tuple(self._tasks)

    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks.values())

    def positions(self) -> dict[str, Bar]:
        return {task_id: task.bar for task_id, task in self._tasks.items()}
