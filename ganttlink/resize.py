from __future__ import annotations

import logging

from .calculator import constrains_successor_end, fixed_successor_x, min_successor_x, normalize_dependency_type
from .graph import RelationshipIndex, RelationshipSource, as_index, collect_rigid_group
from .resolver import ResolverConfig, resolve_movement
from .schema import Relationship
from .store import PositionStore, apply_resolution

LOGGER = logging.getLogger(__name__)


def resolve_after_resize(
    task_id: str,
    store: PositionStore,
    relationships: RelationshipSource,
    config: ResolverConfig | None = None,
) -> None:
    """Re-establish links touching ``task_id`` after its width changed.

    Backward pass first: FF/SF links where the resized task is the successor
    anchor on its end, so the task (with its rigid partners) may have to move.
    Forward pass second, against the corrected position: elastic successors are
    pushed and fixed successors are snapped together with their rigid group.
    Locked tasks are never moved.
    """
    cfg = config or ResolverConfig()
    index = as_index(relationships)
    if store.get_task(task_id) is None:
        return

    for rel in index.incoming(task_id):
        if not constrains_successor_end(rel.dependency_type):
            continue
        task = store.get_task(task_id)
        pred = store.get_task(rel.predecessor_id)
        if task is None or pred is None:
            continue
        if task.locked:
            LOGGER.debug("resize of locked task %s leaves its own position untouched", task_id)
            break
        bound = min_successor_x(rel.dependency_type, pred.bar, task.bar, cfg.lag_px(rel))
        if task.bar.x < bound or (not rel.elastic and task.bar.x != bound):
            _shift_side(task_id, rel.predecessor_id, bound - task.bar.x, store, index, cfg)

    for rel in index.outgoing(task_id):
        task = store.get_task(task_id)
        succ = store.get_task(rel.successor_id)
        if task is None or succ is None or succ.locked:
            continue
        if rel.elastic:
            _push_successor(rel, store, index, cfg)
            continue
        kind = normalize_dependency_type(rel.dependency_type)
        exact = fixed_successor_x(kind, task.bar, succ.bar, cfg.lag_px(rel))
        if exact != succ.bar.x:
            _shift_side(rel.successor_id, task_id, exact - succ.bar.x, store, index, cfg)


def _shift_side(
    anchor_id: str,
    pivot_id: str,
    delta_x: float,
    store: PositionStore,
    index: RelationshipIndex,
    cfg: ResolverConfig,
) -> None:
    """Translate ``anchor_id`` and its rigid partners, leaving everything bound to ``pivot_id`` alone."""
    pivot_side = {pivot_id, *(link.task_id for link in collect_rigid_group(pivot_id, index, exclude=(anchor_id,)))}
    member_ids = [anchor_id, *(link.task_id for link in collect_rigid_group(anchor_id, index, exclude=pivot_side))]
    members = [task for task in (store.get_task(member_id) for member_id in member_ids) if task is not None]
    for member in members:
        if member.locked:
            LOGGER.debug("snap of %s blocked: rigid group member %s is locked", anchor_id, member.task_id)
            return

    for member in members:
        store.update_bar_position(member.task_id, x=member.bar.x + delta_x)

    moved = {member.task_id for member in members}
    for member in members:
        for rel in index.outgoing(member.task_id):
            if rel.elastic and rel.successor_id not in moved:
                _push_successor(rel, store, index, cfg)


def _push_successor(rel: Relationship, store: PositionStore, index: RelationshipIndex, cfg: ResolverConfig) -> None:
    pred = store.get_task(rel.predecessor_id)
    succ = store.get_task(rel.successor_id)
    if pred is None or succ is None or succ.locked:
        return
    bound = min_successor_x(rel.dependency_type, pred.bar, succ.bar, cfg.lag_px(rel))
    if succ.bar.x < bound:
        apply_resolution(store, resolve_movement(rel.successor_id, bound, succ.bar.y, store, index, cfg))
