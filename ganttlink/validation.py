from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .calculator import min_successor_x
from .graph import RelationshipSource, as_index, collect_rigid_group, find_dependency_cycle
from .resolver import ResolverConfig
from .schema import DEPENDENCY_TYPES, Relationship
from .store import PositionStore

ViolationKind = Literal["min_bound", "exact_offset"]


@dataclass(frozen=True)
class ValidationReport:
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ConstraintViolation:
    relationship: Relationship
    kind: ViolationKind
    expected_x: float
    actual_x: float

    def describe(self) -> str:
        if self.kind == "exact_offset":
            return (
                f"{self.relationship.label()}: successor at x={self.actual_x:g}, "
                f"fixed link requires x={self.expected_x:g}"
            )
        return (
            f"{self.relationship.label()}: successor at x={self.actual_x:g}, "
            f"earliest legal x={self.expected_x:g}"
        )


def find_constraint_violations(
    store: PositionStore,
    relationships: RelationshipSource,
    config: ResolverConfig | None = None,
    *,
    tolerance: float = 1e-6,
) -> tuple[ConstraintViolation, ...]:
    cfg = config or ResolverConfig()
    index = as_index(relationships)
    out: list[ConstraintViolation] = []
    for rel in index.relationships:
        pred = store.get_task(rel.predecessor_id)
        succ = store.get_task(rel.successor_id)
        if pred is None or succ is None:
            continue
        expected = min_successor_x(rel.dependency_type, pred.bar, succ.bar, cfg.lag_px(rel))
        if rel.elastic:
            if succ.bar.x < expected - tolerance:
                out.append(ConstraintViolation(rel, "min_bound", expected, succ.bar.x))
        elif abs(succ.bar.x - expected) > tolerance:
            out.append(ConstraintViolation(rel, "exact_offset", expected, succ.bar.x))
    return tuple(out)


def validate_relationship_integrity(store: PositionStore, relationships: RelationshipSource) -> ValidationReport:
    errors: list[str] = []
    warnings: list[str] = []
    index = as_index(relationships)

    seen: set[tuple[str, str, str, bool]] = set()
    for rel in index.relationships:
        missing = tuple(
            task_id for task_id in (rel.predecessor_id, rel.successor_id) if store.get_task(task_id) is None
        )
        if missing:
            errors.append(f"Relationship {rel.label()} references unknown tasks: {', '.join(missing)}")
        if rel.predecessor_id == rel.successor_id:
            errors.append(f"Relationship {rel.label()} links a task to itself")
        if rel.dependency_type not in DEPENDENCY_TYPES:
            warnings.append(
                f"Relationship {rel.label()} has unknown dependency type `{rel.dependency_type}`; treated as FS"
            )
        key = (rel.predecessor_id, rel.successor_id, rel.dependency_type, rel.elastic)
        if key in seen:
            warnings.append(f"Duplicate relationship {rel.label()}")
        seen.add(key)

    cycle = find_dependency_cycle(index)
    if cycle:
        errors.append(f"Elastic dependency cycle detected: {' -> '.join(cycle)}")

    reported: set[str] = set()
    for task_id in sorted(index.task_ids()):
        if task_id in reported:
            continue
        group = (task_id,) + tuple(link.task_id for link in collect_rigid_group(task_id, index))
        if len(group) < 2:
            continue
        reported.update(group)
        locked: list[str] = []
        for member in sorted(group):
            task = store.get_task(member)
            if task is not None and task.locked:
                locked.append(member)
        if locked:
            warnings.append(
                f"Rigid group {', '.join(sorted(group))} contains locked tasks ({', '.join(locked)}) and cannot move"
            )

    return ValidationReport(errors=tuple(errors), warnings=tuple(warnings))


def validate_schedule(
    store: PositionStore,
    relationships: RelationshipSource,
    config: ResolverConfig | None = None,
) -> ValidationReport:
    integrity = validate_relationship_integrity(store, relationships)
    violations = find_constraint_violations(store, relationships, config)
    return ValidationReport(
        errors=tuple(list(integrity.errors) + [v.describe() for v in violations]),
        warnings=integrity.warnings,
    )


def require_valid_schedule(
    store: PositionStore,
    relationships: RelationshipSource,
    config: ResolverConfig | None = None,
) -> None:
    report = validate_schedule(store, relationships, config)
    if report.errors:
        joined = "; ".join(report.errors)
        raise ValueError(f"Schedule validation failed: {joined}")
