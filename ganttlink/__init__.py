"""Dependency constraint resolution for interactive Gantt bar moves and resizes."""

from .audit import JsonlAuditSink, resize_entry, resolution_entry
from .calculator import (
    constrains_successor_end,
    fixed_successor_x,
    max_predecessor_x,
    min_successor_x,
    normalize_dependency_type,
    push_amount,
)
from .exporters import SnapshotExportBundle, export_snapshot_bundle
from .graph import (
    RelationshipIndex,
    RigidLink,
    collect_dependent_tasks,
    collect_rigid_group,
    find_dependency_cycle,
)
from .resize import resolve_after_resize
from .resolver import ResolverConfig, clamp_batch_delta_x, resolve_movement
from .schema import (
    DEPENDENCY_TYPES,
    SCHEDULE_JSON_SCHEMA,
    Bar,
    Relationship,
    Schedule,
    Task,
    load_schedule,
    relationship_from_dict,
    schedule_from_dict,
    schedule_json_schema,
    task_from_dict,
)
from .snapshot_renderer import SnapshotRenderConfig, render_schedule_ascii
from .store import (
    BatchResolution,
    InMemoryTaskStore,
    PositionStore,
    Resolution,
    SingleResolution,
    TaskPosition,
    apply_resolution,
)
from .validation import (
    ConstraintViolation,
    ValidationReport,
    find_constraint_violations,
    require_valid_schedule,
    validate_relationship_integrity,
    validate_schedule,
)

__all__ = [
    "Bar",
    "BatchResolution",
    "ConstraintViolation",
    "DEPENDENCY_TYPES",
    "InMemoryTaskStore",
    "JsonlAuditSink",
    "PositionStore",
    "Relationship",
    "RelationshipIndex",
    "Resolution",
    "ResolverConfig",
    "RigidLink",
    "SCHEDULE_JSON_SCHEMA",
    "Schedule",
    "SingleResolution",
    "SnapshotExportBundle",
    "SnapshotRenderConfig",
    "Task",
    "TaskPosition",
    "ValidationReport",
    "apply_resolution",
    "clamp_batch_delta_x",
    "collect_dependent_tasks",
    "collect_rigid_group",
    "constrains_successor_end",
    "export_snapshot_bundle",
    "find_constraint_violations",
    "find_dependency_cycle",
    "fixed_successor_x",
    "load_schedule",
    "max_predecessor_x",
    "min_successor_x",
    "normalize_dependency_type",
    "push_amount",
    "relationship_from_dict",
    "render_schedule_ascii",
    "require_valid_schedule",
    "resize_entry",
    "resolution_entry",
    "resolve_after_resize",
    "resolve_movement",
    "schedule_from_dict",
    "schedule_json_schema",
    "task_from_dict",
    "validate_relationship_integrity",
    "validate_schedule",
]
