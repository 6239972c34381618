from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Mapping

from .calculator import max_predecessor_x, min_successor_x, normalize_dependency_type, push_amount
from .graph import RelationshipIndex, RelationshipSource, as_index, collect_rigid_group, find_dependency_cycle
from .schema import Relationship
from .store import (
    BatchResolution,
    PositionStore,
    Resolution,
    SingleResolution,
    TaskPosition,
    apply_resolution,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolverConfig:
    pixels_per_time_unit: float = 1.0
    max_depth: int = 10
    default_lag: float = 0.0
    reject_cycles: bool = True

    def __post_init__(self) -> None:
        if self.pixels_per_time_unit <= 0:
            raise ValueError("pixels_per_time_unit must be > 0")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")

    def lag_px(self, relationship: Relationship) -> float:
        lag = self.default_lag if relationship.lag is None else relationship.lag
        return lag * self.pixels_per_time_unit


@dataclass
class _Frame:
    """One task whose elastic links are being walked; suspended while a pushed counterpart resolves."""

    task_id: str
    x: float
    y: float
    depth: int
    links: tuple[Relationship, ...]
    cursor: int = 0


@dataclass(frozen=True)
class _Push:
    task_id: str
    x: float
    y: float


def resolve_movement(
    task_id: str,
    proposed_x: float,
    proposed_y: float,
    store: PositionStore,
    relationships: RelationshipSource,
    config: ResolverConfig | None = None,
    *,
    depth: int = 0,
) -> Resolution | None:
    """Resolve a proposed move of ``task_id`` against every declared relationship.

    Returns ``None`` when the move is blocked, a :class:`BatchResolution` when the
    task belongs to a rigid group, and otherwise a :class:`SingleResolution` with
    the clamped position. Successors pushed along the way are written to
    ``store`` before this returns; applying the returned result is left to the
    caller.
    """
    cfg = config or ResolverConfig()
    index = as_index(relationships)

    if cfg.reject_cycles and depth == 0:
        cycle = find_dependency_cycle(index, start=task_id)
        if cycle is not None:
            LOGGER.warning("rejecting move of %s: dependency cycle %s", task_id, " -> ".join(cycle))
            return None

    opened = _open(task_id, proposed_x, proposed_y, depth, store, index, cfg)
    if not isinstance(opened, _Frame):
        return opened

    stack: list[_Frame] = [opened]
    while stack:
        frame = stack[-1]
        push = _advance(frame, store, cfg)
        if push is None:
            stack.pop()
            outcome = SingleResolution(task_id=frame.task_id, x=frame.x, y=frame.y)
            if not stack:
                return outcome
            apply_resolution(store, outcome)
            continue
        child = _open(push.task_id, push.x, push.y, frame.depth + 1, store, index, cfg)
        if isinstance(child, _Frame):
            stack.append(child)
        else:
            apply_resolution(store, child)
    return None


def _open(
    task_id: str,
    x: float,
    y: float,
    depth: int,
    store: PositionStore,
    index: RelationshipIndex,
    cfg: ResolverConfig,
) -> _Frame | Resolution | None:
    if depth > cfg.max_depth:
        LOGGER.warning("cascade depth %d exceeds ceiling %d; %s left in place", depth, cfg.max_depth, task_id)
        return None

    task = store.get_task(task_id)
    if task is None:
        return None
    if task.locked:
        LOGGER.debug("move of %s blocked: task is locked", task_id)
        return None

    links = collect_rigid_group(task_id, index)
    if links:
        members = []
        for link in links:
            member = store.get_task(link.task_id)
            if member is None:
                continue
            if member.locked:
                LOGGER.debug("move of %s blocked: rigid group member %s is locked", task_id, link.task_id)
                return None
            members.append(member)
        delta_x = x - task.bar.x
        delta_y = y - task.bar.y
        updates = [TaskPosition(task_id=task_id, x=x, y=y)]
        updates.extend(
            TaskPosition(task_id=member.task_id, x=member.bar.x + delta_x, y=member.bar.y + delta_y)
            for member in members
        )
        return BatchResolution(updates=tuple(updates))

    elastic = tuple(rel for rel in index.touching(task_id) if rel.elastic)
    return _Frame(task_id=task_id, x=x, y=y, depth=depth, links=elastic)


def _advance(frame: _Frame, store: PositionStore, cfg: ResolverConfig) -> _Push | None:
    """Apply the frame's remaining links in order; stop at the first counterpart that needs a push."""
    while frame.cursor < len(frame.links):
        rel = frame.links[frame.cursor]
        frame.cursor += 1

        task = store.get_task(frame.task_id)
        if task is None:
            return None
        is_predecessor = rel.predecessor_id == frame.task_id
        other_id = rel.counterpart(frame.task_id)
        other = store.get_task(other_id)
        if other is None:
            continue

        kind = normalize_dependency_type(rel.dependency_type)
        lag_px = cfg.lag_px(rel)

        if is_predecessor:
            amount = push_amount(kind, task.bar, other.bar, lag_px, frame.x)
            if amount <= 0:
                continue
            if other.locked:
                limit = max_predecessor_x(kind, task.bar, other.bar, lag_px, other.bar.x)
                if limit < frame.x:
                    LOGGER.debug("%s clamped to %s by locked successor %s", frame.task_id, limit, other_id)
                    frame.x = limit
                continue
            return _Push(task_id=other_id, x=other.bar.x + amount, y=other.bar.y)

        bound = min_successor_x(kind, other.bar, task.bar, lag_px)
        if frame.x < bound:
            frame.x = bound
    return None


def clamp_batch_delta_x(
    batch_originals: Mapping[str, float],
    proposed_delta_x: float,
    store: PositionStore,
    relationships: RelationshipSource,
    config: ResolverConfig | None = None,
) -> float:
    """Limit a backward multi-task drag so no member crosses an outside predecessor's bound.

    ``batch_originals`` maps each dragged task to its ``x`` when the drag began.
    Predecessors inside the batch move with it and are ignored. A member that
    already violates its bound is held in place rather than pushed forward.
    """
    if proposed_delta_x >= 0:
        return proposed_delta_x

    cfg = config or ResolverConfig()
    index = as_index(relationships)
    allowed = proposed_delta_x

    for task_id, original_x in batch_originals.items():
        task = store.get_task(task_id)
        if task is None:
            continue
        for rel in index.incoming(task_id):
            if rel.predecessor_id in batch_originals:
                continue
            pred = store.get_task(rel.predecessor_id)
            if pred is None:
                continue
            bound = min_successor_x(rel.dependency_type, pred.bar, task.bar, cfg.lag_px(rel))
            if original_x + proposed_delta_x >= bound:
                continue
            max_backward = bound - original_x
            if max_backward <= 0:
                allowed = max(allowed, max_backward)
            else:
                allowed = max(allowed, 0.0)
    return allowed
