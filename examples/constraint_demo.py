from __future__ import annotations

import argparse
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ganttlink import (
    InMemoryTaskStore,
    ResolverConfig,
    apply_resolution,
    export_snapshot_bundle,
    load_schedule,
    render_schedule_ascii,
    resolve_movement,
)

DEFAULT_SCHEDULE = Path(__file__).resolve().parent / "schedules" / "demo_schedule.json"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Drag one bar of a schedule and show the resolved cascade.")
    parser.add_argument("--schedule", default=str(DEFAULT_SCHEDULE))
    parser.add_argument("--task", default="design")
    parser.add_argument("--x", type=float, default=10.0)
    parser.add_argument("--export-dir", default=None)
    return parser.parse_args(argv)


def run_demo(schedule_path: str | Path, task_id: str, new_x: float) -> tuple[str, str, InMemoryTaskStore]:
    schedule = load_schedule(schedule_path)
    store = InMemoryTaskStore(schedule.tasks)
    config = ResolverConfig()

    before = render_schedule_ascii(store, schedule.relationships)
    task = store.get_task(task_id)
    if task is None:
        raise KeyError(task_id)
    resolution = resolve_movement(task_id, new_x, task.bar.y, store, schedule.relationships, config)
    apply_resolution(store, resolution)
    after = render_schedule_ascii(store, schedule.relationships)
    return before, after, store


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    before, after, store = run_demo(args.schedule, args.task, args.x)
    print("Before:")
    print(before)
    print(f"After moving {args.task} to x={args.x:g}:")
    print(after)

    if args.export_dir:
        schedule = load_schedule(args.schedule)
        bundle = export_snapshot_bundle(store, schedule.relationships, out_dir=args.export_dir, prefix="demo")
        print("Artifacts:")
        print("\n".join(f"- {key}: {value}" for key, value in bundle.as_dict().items()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
