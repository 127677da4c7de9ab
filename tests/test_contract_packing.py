from __future__ import annotations

import random
import unittest

from tideline.model import Lane, Task
from tideline.packing import group_tasks_by_lane, max_overlap_depth, pack_lane, pack_lanes
from tideline.planner import tasks_overlap
from tideline.util.dates import add_days


def _t(tid: str, start: str, end: str, lane: str = "lane-a") -> Task:
    return Task(id=tid, name=tid, start=start, end=end, lane_id=lane)


class TestLaneRowPackerContract(unittest.TestCase):
    def test_overlaps_stack_and_gaps_reuse_rows(self) -> None:
        a = _t("a", "2025-10-10", "2025-10-12")
        b = _t("b", "2025-10-11", "2025-10-13")
        c = _t("c", "2025-10-13", "2025-10-14")
        layout = pack_lane([c, b, a])
        self.assertEqual(layout.assignments, {"a": 0, "b": 1, "c": 0})
        self.assertEqual(layout.rows, 2)

    def test_back_to_back_tasks_share_a_row(self) -> None:
        layout = pack_lane([_t("a", "2025-10-10", "2025-10-12"), _t("b", "2025-10-13", "2025-10-15")])
        self.assertEqual(layout.rows, 1)
        self.assertEqual(layout.assignments, {"a": 0, "b": 0})

    def test_empty_lane_has_one_row(self) -> None:
        layout = pack_lane([])
        self.assertEqual(layout.rows, 1)
        self.assertEqual(layout.assignments, {})

    def test_ties_keep_input_order(self) -> None:
        x = _t("x", "2025-10-10", "2025-10-12")
        y = _t("y", "2025-10-10", "2025-10-12")
        self.assertEqual(pack_lane([x, y]).assignments, {"x": 0, "y": 1})
        self.assertEqual(pack_lane([y, x]).assignments, {"y": 0, "x": 1})

    def test_rows_equal_max_overlap_depth(self) -> None:
        rng = random.Random(20251010)
        for _ in range(40):
            tasks = []
            for i in range(rng.randint(1, 12)):
                start = add_days("2025-10-01", rng.randint(0, 20))
                tasks.append(_t(f"t{i}", start, add_days(start, rng.randint(0, 6))))

            layout = pack_lane(tasks)
            self.assertEqual(layout.rows, max_overlap_depth(tasks))
            for i, a in enumerate(tasks):
                for b in tasks[i + 1:]:
                    if tasks_overlap(a, b):
                        self.assertNotEqual(layout.assignments[a.id], layout.assignments[b.id])

    def test_pack_lanes_covers_declared_and_unknown_lanes(self) -> None:
        lanes = [Lane("lane-a", "A"), Lane("lane-empty", "Empty")]
        tasks = [_t("a", "2025-10-10", "2025-10-12"), _t("ghost", "2025-10-10", "2025-10-12", "lane-ghost")]
        layouts = pack_lanes(lanes, tasks)
        self.assertEqual(list(layouts), ["lane-a", "lane-empty", "lane-ghost"])
        self.assertEqual(layouts["lane-empty"].rows, 1)
        self.assertEqual(layouts["lane-ghost"].assignments, {"ghost": 0})
        self.assertEqual([t.id for t in group_tasks_by_lane(lanes, tasks)["lane-a"]], ["a"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
