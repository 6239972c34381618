from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Sequence

from ganttlink import (
    InMemoryTaskStore,
    JsonlAuditSink,
    ResolverConfig,
    apply_resolution,
    export_snapshot_bundle,
    load_schedule,
    resolution_entry,
    resize_entry,
    resolve_after_resize,
    resolve_movement,
    validate_schedule,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ganttlink")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    move = sub.add_parser("move", help="Propose a new position for one task and print the resolved schedule.")
    _add_schedule_options(move)
    move.add_argument("--task", required=True)
    move.add_argument("--x", type=float, required=True)
    move.add_argument("--y", type=float, default=None, help="Default: the task's current y.")

    resize = sub.add_parser("resize", help="Set a task's width and re-establish its links.")
    _add_schedule_options(resize)
    resize.add_argument("--task", required=True)
    resize.add_argument("--width", type=float, required=True)

    validate = sub.add_parser("validate", help="Check relationship integrity and constraint satisfaction.")
    _add_schedule_options(validate)

    report = sub.add_parser("audit-report", help="Print audit summary from a JSONL sink.")
    report.add_argument("--audit-log", type=Path, required=True)

    prune = sub.add_parser("audit-prune", help="Prune old audit rows to max row count.")
    prune.add_argument("--audit-log", type=Path, required=True)
    prune.add_argument("--max-rows", type=int, required=True)
    return parser


def _add_schedule_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--schedule", type=Path, required=True)
    parser.add_argument("--pixels-per-time-unit", type=float, default=1.0)
    parser.add_argument("--max-depth", type=int, default=10)
    parser.add_argument("--allow-cycles", action="store_true", help="Fall back to the depth ceiling for cycles.")
    parser.add_argument("--export-dir", type=Path, default=None)
    parser.add_argument("--audit-log", type=Path, default=None)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "audit-report":
        print(json.dumps(JsonlAuditSink(args.audit_log).summarize(), indent=2, sort_keys=True))
        return 0

    if args.command == "audit-prune":
        deleted = JsonlAuditSink(args.audit_log).prune(max_rows=args.max_rows)
        print(f"pruned rows={deleted}")
        return 0

    schedule = load_schedule(args.schedule)
    store = InMemoryTaskStore(schedule.tasks)
    config = ResolverConfig(
        pixels_per_time_unit=args.pixels_per_time_unit,
        max_depth=args.max_depth,
        reject_cycles=not args.allow_cycles,
    )
    audit = JsonlAuditSink(args.audit_log) if args.audit_log is not None else None
    output: dict[str, Any] = {"command": args.command}

    if args.command == "move":
        task = store.get_task(args.task)
        if task is None:
            raise SystemExit(f"unknown task: {args.task}")
        y = task.bar.y if args.y is None else args.y
        resolution = resolve_movement(args.task, args.x, y, store, schedule.relationships, config)
        apply_resolution(store, resolution)
        output["resolution"] = None if resolution is None else resolution.as_dict()
        if audit is not None:
            audit.log(
                resolution_entry(
                    action="move",
                    task_id=args.task,
                    requested={"x": args.x, "y": y},
                    resolution=resolution,
                )
            )
    elif args.command == "resize":
        if store.get_task(args.task) is None:
            raise SystemExit(f"unknown task: {args.task}")
        before = store.positions()
        store.update_bar_position(args.task, width=args.width)
        resolve_after_resize(args.task, store, schedule.relationships, config)
        if audit is not None:
            audit.log(
                resize_entry(
                    task_id=args.task,
                    requested_width=args.width,
                    before=before,
                    after=store.positions(),
                )
            )

    report = validate_schedule(store, schedule.relationships, config)
    output["positions"] = {
        task_id: {"x": bar.x, "y": bar.y, "width": bar.width} for task_id, bar in store.positions().items()
    }
    output["errors"] = list(report.errors)
    output["warnings"] = list(report.warnings)

    if args.export_dir is not None:
        bundle = export_snapshot_bundle(
            store,
            schedule.relationships,
            out_dir=args.export_dir,
            prefix=args.command,
            resolver_config=config,
        )
        output["exports"] = bundle.as_dict()

    print(json.dumps(output, indent=2, sort_keys=True))
    if args.command == "validate" and not report.ok:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
