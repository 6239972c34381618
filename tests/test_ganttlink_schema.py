from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from ganttlink.schema import (
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


def _payload() -> dict[str, object]:
    return {
        "tasks": [
            {"id": "A", "bar": {"x": 0, "width": 100, "y": 10, "height": 20}},
            {"id": "B", "$bar": {"x": 150, "width": 50}, "constraints": {"locked": True}},
        ],
        "relationships": [
            {"from": "A", "to": "B", "type": "ss", "lag": 5},
            {"from": "B", "to": "A", "elastic": False},
        ],
    }


class ModelTests(unittest.TestCase):
    def test_bar_rejects_negative_width(self) -> None:
        with self.assertRaises(ValueError):
            Bar(x=0, width=-1)

    def test_bar_end_x(self) -> None:
        self.assertEqual(Bar(x=10, width=25).end_x, 35)

    def test_task_requires_id(self) -> None:
        with self.assertRaises(ValueError):
            Task(task_id=" ", bar=Bar(x=0, width=1))

    def test_schedule_rejects_duplicate_ids(self) -> None:
        with self.assertRaises(ValueError):
            Schedule(tasks=(Task("A", Bar(x=0, width=1)), Task("A", Bar(x=1, width=1))))

    def test_relationship_helpers(self) -> None:
        rel = Relationship("A", "B", "FF", 3, elastic=False)
        self.assertEqual(rel.counterpart("A"), "B")
        self.assertEqual(rel.counterpart("B"), "A")
        self.assertEqual(Relationship("A", "A").counterpart("A"), "A")
        self.assertEqual(rel.label(), "A -FF-> B (fixed)")
        with self.assertRaises(ValueError):
            rel.counterpart("C")


class ScheduleLoadingTests(unittest.TestCase):
    def test_task_accepts_bar_aliases_and_nested_lock(self) -> None:
        payload = _payload()
        task = task_from_dict(payload["tasks"][1])
        self.assertEqual(task.bar, Bar(x=150, width=50))
        self.assertTrue(task.locked)

    def test_top_level_lock_wins_over_constraints(self) -> None:
        task = task_from_dict({"id": "A", "bar": {"x": 0, "width": 1}, "locked": False, "constraints": {"locked": True}})
        self.assertFalse(task.locked)

    def test_task_without_bar_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            task_from_dict({"id": "A"})

    def test_relationship_defaults(self) -> None:
        rel = relationship_from_dict({"from": "A", "to": "B"})
        self.assertEqual(rel.dependency_type, "FS")
        self.assertIsNone(rel.lag)
        self.assertTrue(rel.elastic)

    def test_relationship_type_is_normalized(self) -> None:
        rel = relationship_from_dict({"from": "A", "to": "B", "type": " ff ", "lag": 2, "elastic": False})
        self.assertEqual(rel.dependency_type, "FF")
        self.assertEqual(rel.lag, 2.0)
        self.assertFalse(rel.elastic)

    def test_schedule_from_dict(self) -> None:
        schedule = schedule_from_dict(_payload())
        self.assertEqual([task.task_id for task in schedule.tasks], ["A", "B"])
        self.assertEqual(schedule.task_lookup()["A"].bar.y, 10)
        self.assertEqual(len(schedule.relationships), 2)
        self.assertEqual(schedule.relationships[0].dependency_type, "SS")

    def test_explicit_relationships_override_payload(self) -> None:
        override = [Relationship("A", "B")]
        schedule = schedule_from_dict(_payload(), relationships=override)
        self.assertEqual(schedule.relationships, tuple(override))

    def test_tasks_must_be_a_list(self) -> None:
        with self.assertRaises(TypeError):
            schedule_from_dict({"tasks": {}})
        with self.assertRaises(TypeError):
            schedule_from_dict({"tasks": [], "relationships": {}})

    def test_load_schedule_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "schedule.json"
            path.write_text(json.dumps(_payload()), encoding="utf-8")
            schedule = load_schedule(path)
        self.assertEqual(len(schedule.tasks), 2)

    def test_load_schedule_rejects_non_object(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "schedule.json"
            path.write_text("[]", encoding="utf-8")
            with self.assertRaises(TypeError):
                load_schedule(path)

    def test_json_schema_is_a_copy(self) -> None:
        schema = schedule_json_schema()
        schema["title"] = "changed"
        self.assertEqual(schedule_json_schema()["title"], "Ganttlink Schedule")
        self.assertIn("relationships", schema["properties"])


if __name__ == "__main__":
    unittest.main()
