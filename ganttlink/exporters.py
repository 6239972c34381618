from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from .calculator import constrains_successor_end, normalize_dependency_type
from .graph import RelationshipSource, as_index
from .resolver import ResolverConfig
from .schema import Relationship, Task
from .snapshot_renderer import SnapshotRenderConfig, ordered_tasks, render_schedule_ascii
from .store import PositionStore
from .validation import find_constraint_violations

BG = (17, 24, 39)
FG = (226, 232, 240)
BAR_COLOR = (37, 99, 235)
LOCKED_COLOR = (148, 163, 184)
LINK_OK = (22, 163, 74)
LINK_VIOLATED = (220, 38, 38)


@dataclass(frozen=True)
class SnapshotExportBundle:
    ascii_snapshot: Path
    markdown_snapshot: Path
    png_snapshot: Path

    def as_dict(self) -> dict[str, str]:
        return {
            "ascii_snapshot": str(self.ascii_snapshot),
            "markdown_snapshot": str(self.markdown_snapshot),
            "png_snapshot": str(self.png_snapshot),
        }


def export_snapshot_bundle(
    store: PositionStore,
    relationships: RelationshipSource,
    *,
    out_dir: str | Path,
    prefix: str = "ganttlink",
    task_ids: tuple[str, ...] | None = None,
    render_config: SnapshotRenderConfig | None = None,
    resolver_config: ResolverConfig | None = None,
) -> SnapshotExportBundle:
    root = Path(out_dir)
    root.mkdir(parents=True, exist_ok=True)
    index = as_index(relationships)

    ascii_text = render_schedule_ascii(store, index, task_ids, render_config, resolver_config)
    markdown_text = _build_markdown_snapshot(ascii_text)

    path_ascii = root / f"{prefix}_snapshot.txt"
    path_markdown = root / f"{prefix}_snapshot.md"
    path_png = root / f"{prefix}_snapshot.png"

    path_ascii.write_text(ascii_text, encoding="utf-8")
    path_markdown.write_text(markdown_text, encoding="utf-8")

    tasks = ordered_tasks(store, task_ids)
    violated = {v.relationship for v in find_constraint_violations(store, index, resolver_config)}
    _render_bars_png(tasks=tasks, relationships=index.relationships, violated=violated, out_path=path_png)

    return SnapshotExportBundle(
        ascii_snapshot=path_ascii,
        markdown_snapshot=path_markdown,
        png_snapshot=path_png,
    )


def _build_markdown_snapshot(ascii_text: str) -> str:
    return (
        "# Schedule Snapshot\n\n"
        "```text\n"
        f"{ascii_text.rstrip()}\n"
        "```\n"
    )


def _render_bars_png(
    *,
    tasks: list[Task],
    relationships: tuple[Relationship, ...],
    violated: set[Relationship],
    out_path: Path,
    padding: int = 16,
    label_width: int = 96,
    row_height: int = 28,
    bar_height: int = 16,
) -> None:
    font = ImageFont.load_default()
    if not tasks:
        Image.new("RGB", (320, 120), color=BG).save(out_path)
        return

    origin = min(0.0, min(task.bar.x for task in tasks))
    extent = max(task.bar.x + task.bar.width for task in tasks) - origin
    chart_width = max(200, int(extent) + padding)
    width = label_width + chart_width + padding * 2
    height = max(120, len(tasks) * row_height + padding * 2)
    image = Image.new("RGB", (width, height), color=BG)
    draw = ImageDraw.Draw(image)

    rows: dict[str, int] = {}
    for row, task in enumerate(tasks):
        rows[task.task_id] = row
        top = padding + row * row_height + (row_height - bar_height) // 2
        left = padding + label_width + int(task.bar.x - origin)
        right = left + max(1, int(task.bar.width))
        draw.text((padding, top), task.task_id, fill=FG, font=font)
        draw.rectangle(
            (left, top, right, top + bar_height),
            fill=LOCKED_COLOR if task.locked else BAR_COLOR,
            outline=FG,
        )

    lookup = {task.task_id: task for task in tasks}
    for rel in relationships:
        pred = lookup.get(rel.predecessor_id)
        succ = lookup.get(rel.successor_id)
        if pred is None or succ is None:
            continue
        kind = normalize_dependency_type(rel.dependency_type)
        pred_anchor = pred.bar.x if kind in ("SS", "SF") else pred.bar.x + pred.bar.width
        succ_anchor = succ.bar.x + succ.bar.width if constrains_successor_end(kind) else succ.bar.x
        x0 = padding + label_width + int(pred_anchor - origin)
        x1 = padding + label_width + int(succ_anchor - origin)
        y0 = padding + rows[pred.task_id] * row_height + row_height // 2
        y1 = padding + rows[succ.task_id] * row_height + row_height // 2
        color = LINK_VIOLATED if rel in violated else LINK_OK
        draw.line((x0, y0, x0, y1, x1, y1), fill=color, width=1 if rel.elastic else 2)

    image.save(out_path)
