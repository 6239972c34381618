from __future__ import annotations

import unittest

from ganttlink.resolver import ResolverConfig, clamp_batch_delta_x
from ganttlink.schema import Bar, Relationship, Task
from ganttlink.store import InMemoryTaskStore


def _store() -> InMemoryTaskStore:
    return InMemoryTaskStore(
        [
            Task("A", Bar(x=0, width=100)),
            Task("B", Bar(x=150, width=50)),
            Task("C", Bar(x=300, width=20)),
        ]
    )


def _rels(lag: float = 0) -> list[Relationship]:
    return [Relationship("A", "B", "FS", lag), Relationship("B", "C", "FS", 0)]


class ClampBatchDeltaTests(unittest.TestCase):
    def test_forward_drag_is_never_limited(self) -> None:
        self.assertEqual(clamp_batch_delta_x({"B": 150, "C": 300}, 40, _store(), _rels()), 40)

    def test_backward_drag_within_slack_is_kept(self) -> None:
        self.assertEqual(clamp_batch_delta_x({"B": 150, "C": 300}, -30, _store(), _rels()), -30)

    def test_backward_drag_is_limited_by_outside_predecessor(self) -> None:
        self.assertEqual(clamp_batch_delta_x({"B": 150, "C": 300}, -80, _store(), _rels()), -50)

    def test_predecessor_inside_batch_is_ignored(self) -> None:
        self.assertEqual(clamp_batch_delta_x({"A": 0, "B": 150}, -500, _store(), _rels()), -500)

    def test_member_already_violating_is_held(self) -> None:
        self.assertEqual(clamp_batch_delta_x({"B": 90}, -10, _store(), _rels()), 0)

    def test_lag_is_scaled_by_config(self) -> None:
        cfg = ResolverConfig(pixels_per_time_unit=10)
        self.assertEqual(clamp_batch_delta_x({"B": 150}, -80, _store(), _rels(lag=2), cfg), -30)

    def test_unknown_members_are_skipped(self) -> None:
        self.assertEqual(clamp_batch_delta_x({"ghost": 10}, -80, _store(), _rels()), -80)


if __name__ == "__main__":
    unittest.main()
