from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

DEPENDENCY_TYPES: tuple[str, ...] = ("FS", "SS", "FF", "SF")
DEFAULT_DEPENDENCY_TYPE = "FS"


@dataclass(frozen=True)
class Bar:
    x: float
    width: float
    y: float = 0.0
    height: float = 0.0

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ValueError("Bar.width must be >= 0")
        if self.height < 0:
            raise ValueError("Bar.height must be >= 0")

    @property
    def end_x(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class Task:
    task_id: str
    bar: Bar
    locked: bool = False

    def __post_init__(self) -> None:
        if not self.task_id.strip():
            raise ValueError("Task.task_id must be non-empty")


@dataclass(frozen=True)
class Relationship:
    """Precedence link from ``predecessor_id`` to ``successor_id``.

    ``lag`` of ``None`` means "use the resolver's default lag". An elastic link
    treats the lag as a minimum separation; a fixed link binds both tasks into
    one rigid unit.
    """

    predecessor_id: str
    successor_id: str
    dependency_type: str = DEFAULT_DEPENDENCY_TYPE
    lag: float | None = None
    elastic: bool = True

    def __post_init__(self) -> None:
        if not self.predecessor_id.strip():
            raise ValueError("Relationship.predecessor_id must be non-empty")
        if not self.successor_id.strip():
            raise ValueError("Relationship.successor_id must be non-empty")

    def counterpart(self, task_id: str) -> str:
        if task_id == self.predecessor_id:
            return self.successor_id
        if task_id == self.successor_id:
            return self.predecessor_id
        raise ValueError(f"Task `{task_id}` is not part of relationship {self.label()}")

    def label(self) -> str:
        link = "elastic" if self.elastic else "fixed"
        return f"{self.predecessor_id} -{self.dependency_type}-> {self.successor_id} ({link})"


@dataclass(frozen=True)
class Schedule:
    tasks: tuple[Task, ...] = ()
    relationships: tuple[Relationship, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for task in self.tasks:
            if task.task_id in seen:
                raise ValueError(f"Duplicate task id `{task.task_id}`")
            seen.add(task.task_id)

    def task_lookup(self) -> dict[str, Task]:
        return {task.task_id: task for task in self.tasks}


SCHEDULE_JSON_SCHEMA: dict[str, object] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://ganttlink.dev/schemas/schedule.schema.json",
    "title": "Ganttlink Schedule",
    "type": "object",
    "required": ["tasks"],
    "properties": {
        "tasks": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "bar"],
                "properties": {
                    "id": {"type": "string"},
                    "bar": {
                        "type": "object",
                        "required": ["x", "width"],
                        "properties": {
                            "x": {"type": "number"},
                            "y": {"type": "number"},
                            "width": {"type": "number", "minimum": 0},
                            "height": {"type": "number", "minimum": 0},
                        },
                    },
                    "locked": {"type": "boolean"},
                    "constraints": {
                        "type": "object",
                        "properties": {"locked": {"type": "boolean"}},
                    },
                },
            },
        },
        "relationships": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["from", "to"],
                "properties": {
                    "from": {"type": "string"},
                    "to": {"type": "string"},
                    "type": {"type": "string", "enum": list(DEPENDENCY_TYPES)},
                    "lag": {"type": "number"},
                    "elastic": {"type": "boolean"},
                },
            },
        },
    },
}


def schedule_json_schema() -> dict[str, object]:
    return json.loads(json.dumps(SCHEDULE_JSON_SCHEMA))


def task_from_dict(raw: Mapping[str, Any]) -> Task:
    bar_raw = raw.get("bar")
    if bar_raw is None:
        bar_raw = raw.get("$bar")
    if not isinstance(bar_raw, Mapping):
        raise TypeError(f"Task `{raw.get('id')}` must carry a `bar` mapping")
    constraints = raw.get("constraints")
    locked = raw.get("locked")
    if locked is None and isinstance(constraints, Mapping):
        locked = constraints.get("locked")
    return Task(
        task_id=str(raw["id"]),
        bar=Bar(
            x=float(bar_raw["x"]),
            width=float(bar_raw["width"]),
            y=float(bar_raw.get("y", 0.0)),
            height=float(bar_raw.get("height", 0.0)),
        ),
        locked=locked is True,
    )


def relationship_from_dict(raw: Mapping[str, Any]) -> Relationship:
    lag = raw.get("lag")
    return Relationship(
        predecessor_id=str(raw["from"]),
        successor_id=str(raw["to"]),
        dependency_type=str(raw.get("type") or DEFAULT_DEPENDENCY_TYPE).strip().upper(),
        lag=None if lag is None else float(lag),
        elastic=raw.get("elastic", True) is not False,
    )


def schedule_from_dict(
    payload: Mapping[str, object],
    *,
    relationships: Iterable[Relationship] | None = None,
) -> Schedule:
    raw_tasks = payload.get("tasks")
    if not isinstance(raw_tasks, list):
        raise TypeError("`tasks` must be a list")

    tasks: list[Task] = []
    for raw in raw_tasks:
        if not isinstance(raw, Mapping):
            raise TypeError("Each task must be a mapping")
        tasks.append(task_from_dict(raw))

    links: tuple[Relationship, ...]
    if relationships is not None:
        links = tuple(relationships)
    else:
        raw_links = payload.get("relationships", [])
        if not isinstance(raw_links, list):
            raise TypeError("`relationships` must be a list when provided")
        links = tuple(relationship_from_dict(item) for item in raw_links if isinstance(item, Mapping))

    return Schedule(tasks=tuple(tasks), relationships=links)


def load_schedule(
    schedule_path: str | Path,
    *,
    relationships: Iterable[Relationship] | None = None,
) -> Schedule:
    path = Path(schedule_path)
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise TypeError("Schedule payload must be a JSON object")
    return schedule_from_dict(payload, relationships=relationships)
