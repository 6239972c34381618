from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Sequence, TypeAlias

from .schema import Relationship
from .store import PositionStore


@dataclass(frozen=True)
class RelationshipIndex:
    """Per-task relationship lookups that keep declaration order."""

    relationships: tuple[Relationship, ...] = ()
    _outgoing: dict[str, tuple[Relationship, ...]] = field(default_factory=dict, repr=False)
    _incoming: dict[str, tuple[Relationship, ...]] = field(default_factory=dict, repr=False)
    _touching: dict[str, tuple[Relationship, ...]] = field(default_factory=dict, repr=False)

    @classmethod
    def build(cls, relationships: Iterable[Relationship]) -> RelationshipIndex:
        ordered = tuple(relationships)
        outgoing: dict[str, list[Relationship]] = {}
        incoming: dict[str, list[Relationship]] = {}
        touching: dict[str, list[Relationship]] = {}
        for rel in ordered:
            outgoing.setdefault(rel.predecessor_id, []).append(rel)
            incoming.setdefault(rel.successor_id, []).append(rel)
            touching.setdefault(rel.predecessor_id, []).append(rel)
            if rel.successor_id != rel.predecessor_id:
                touching.setdefault(rel.successor_id, []).append(rel)
        return cls(
            relationships=ordered,
            _outgoing={key: tuple(value) for key, value in outgoing.items()},
            _incoming={key: tuple(value) for key, value in incoming.items()},
            _touching={key: tuple(value) for key, value in touching.items()},
        )

    def outgoing(self, task_id: str) -> tuple[Relationship, ...]:
        return self._outgoing.get(task_id, ())

    def incoming(self, task_id: str) -> tuple[Relationship, ...]:
        return self._incoming.get(task_id, ())

    def touching(self, task_id: str) -> tuple[Relationship, ...]:
        return self._touching.get(task_id, ())

    def task_ids(self) -> set[str]:
        return set(self._touching)


RelationshipSource: TypeAlias = Sequence[Relationship] | RelationshipIndex


def as_index(relationships: RelationshipSource) -> RelationshipIndex:
    if isinstance(relationships, RelationshipIndex):
        return relationships
    return RelationshipIndex.build(relationships)


@dataclass(frozen=True)
class RigidLink:
    task_id: str
    relationship: Relationship


def collect_rigid_group(
    task_id: str,
    relationships: RelationshipSource,
    *,
    exclude: Iterable[str] = (),
) -> tuple[RigidLink, ...]:
    """Every task bound to ``task_id`` through fixed links, in either direction.

    The origin is not part of the result. Each member is reported once, with the
    fixed link through which it was first reached. Tasks in ``exclude`` are
    neither reported nor walked through.
    """
    index = as_index(relationships)
    linked: list[RigidLink] = []
    seen: set[str] = {task_id, *exclude}
    queue: deque[str] = deque([task_id])

    while queue:
        current = queue.popleft()
        for rel in index.touching(current):
            if rel.elastic:
                continue
            other = rel.counterpart(current)
            if other in seen:
                continue
            seen.add(other)
            linked.append(RigidLink(task_id=other, relationship=rel))
            queue.append(other)
    return tuple(linked)


def collect_dependent_tasks(
    task_id: str,
    relationships: RelationshipSource,
    store: PositionStore | None = None,
) -> tuple[str, ...]:
    """Forward closure over successors, origin first; locked tasks stop the walk."""
    index = as_index(relationships)
    visited: list[str] = []
    seen: set[str] = set()
    queue: deque[str] = deque([task_id])

    while queue:
        current = queue.popleft()
        if current in seen:
            continue
        seen.add(current)
        if store is not None:
            task = store.get_task(current)
            if task is not None and task.locked:
                continue
        visited.append(current)
        for rel in index.outgoing(current):
            if rel.successor_id not in seen:
                queue.append(rel.successor_id)
    return tuple(visited)


def find_dependency_cycle(
    relationships: RelationshipSource,
    *,
    start: str | None = None,
    elastic_only: bool = True,
) -> tuple[str, ...] | None:
    """Return one predecessor->successor cycle as ``(a, b, ..., a)``, or ``None``.

    With ``start`` only the part of the graph reachable from it is searched.
    Fixed links are skipped unless ``elastic_only`` is false, since they are
    resolved as rigid groups rather than cascades.
    """
    index = as_index(relationships)

    def successors(node: str) -> list[str]:
        out: list[str] = []
        for rel in index.outgoing(node):
            if elastic_only and not rel.elastic:
                continue
            out.append(rel.successor_id)
        return out

    roots = [start] if start is not None else sorted(index.task_ids())
    visited: set[str] = set()

    for root in roots:
        if root in visited:
            continue
        trail: list[str] = [root]
        on_trail: set[str] = {root}
        stack: list[tuple[str, list[str]]] = [(root, successors(root))]
        visited.add(root)
        while stack:
            node, pending = stack[-1]
            if not pending:
                stack.pop()
                trail.pop()
                on_trail.discard(node)
                continue
            nxt = pending.pop(0)
            if nxt in on_trail:
                idx = trail.index(nxt)
                return tuple(trail[idx:] + [nxt])
            if nxt in visited:
                continue
            visited.add(nxt)
            trail.append(nxt)
            on_trail.add(nxt)
            stack.append((nxt, successors(nxt)))
    return None
