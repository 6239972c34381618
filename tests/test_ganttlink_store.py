from __future__ import annotations

import unittest

from ganttlink.schema import Bar, Task
from ganttlink.store import (
    BatchResolution,
    InMemoryTaskStore,
    SingleResolution,
    TaskPosition,
    apply_resolution,
)


def _store() -> InMemoryTaskStore:
    return InMemoryTaskStore([Task("A", Bar(x=0, width=10, y=5)), Task("B", Bar(x=20, width=10, y=15))])


class InMemoryTaskStoreTests(unittest.TestCase):
    def test_rejects_duplicate_ids(self) -> None:
        with self.assertRaises(ValueError):
            InMemoryTaskStore([Task("A", Bar(x=0, width=1)), Task("A", Bar(x=5, width=1))])

    def test_update_replaces_only_given_fields(self) -> None:
        store = _store()
        store.update_bar_position("A", width=40)
        self.assertEqual(store.get_task("A").bar, Bar(x=0, width=40, y=5))
        store.update_bar_position("A", x=7)
        self.assertEqual(store.get_task("A").bar, Bar(x=7, width=40, y=5))
        self.assertEqual(store.write_count, 2)

    def test_empty_update_is_not_counted(self) -> None:
        store = _store()
        store.update_bar_position("A")
        self.assertEqual(store.write_count, 0)

    def test_update_unknown_task_raises(self) -> None:
        with self.assertRaises(KeyError):
            _store().update_bar_position("missing", x=1)

    def test_positions_and_tasks_keep_insertion_order(self) -> None:
        store = _store()
        self.assertEqual([task.task_id for task in store.tasks()], ["A", "B"])
        self.assertEqual(store.task_ids(), ("A", "B"))
        self.assertEqual(list(store.positions()), ["A", "B"])


class ApplyResolutionTests(unittest.TestCase):
    def test_single_resolution_writes_x_and_y(self) -> None:
        store = _store()
        apply_resolution(store, SingleResolution(task_id="A", x=3, y=9))
        self.assertEqual(store.get_task("A").bar, Bar(x=3, width=10, y=9))

    def test_batch_resolution_writes_every_update(self) -> None:
        store = _store()
        apply_resolution(
            store,
            BatchResolution(updates=(TaskPosition("A", 1, 5), TaskPosition("B", 21, 15))),
        )
        self.assertEqual(store.get_task("A").bar.x, 1)
        self.assertEqual(store.get_task("B").bar.x, 21)
        self.assertEqual(store.write_count, 2)

    def test_blocked_resolution_writes_nothing(self) -> None:
        store = _store()
        apply_resolution(store, None)
        self.assertEqual(store.write_count, 0)

    def test_as_dict_uses_wire_names(self) -> None:
        self.assertEqual(
            SingleResolution(task_id="A", x=1, y=2).as_dict(),
            {"type": "single", "taskId": "A", "x": 1, "y": 2},
        )
        self.assertEqual(
            BatchResolution(updates=(TaskPosition("A", 1, 2),)).as_dict(),
            {"type": "batch", "updates": [{"taskId": "A", "x": 1, "y": 2}]},
        )


if __name__ == "__main__":
    unittest.main()
