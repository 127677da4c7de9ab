from __future__ import annotations

import unittest

from tideline.model import Lane, Task, TimelineSnapshot
from tideline.state import (
    Command,
    CommandKind,
    NoLanesError,
    TimelineState,
    new_task_draft,
    reduce,
)

LANES = (Lane("lane-a", "A"), Lane("lane-b", "B"))
A = Task(id="a", name="A", start="2025-10-10", end="2025-10-12", lane_id="lane-a")
B = Task(id="b", name="B", start="2025-10-20", end="2025-10-22", lane_id="lane-a")


def _state() -> TimelineState:
    return TimelineState.from_snapshot(TimelineSnapshot(lanes=LANES, tasks=(A, B)))


class TestTimelineReducerContract(unittest.TestCase):
    def test_hydrate_normalizes_enums_and_computes_conflicts(self) -> None:
        clash = Task(id="c", name="C", start="2025-10-11", end="2025-10-11", lane_id="lane-a")
        snap = TimelineSnapshot(lanes=LANES, tasks=(A, clash), zoom="decade", density="cosy")
        s = reduce(TimelineState(), Command(CommandKind.HYDRATE, snap))
        self.assertEqual((s.zoom, s.density), ("month", "comfortable"))
        self.assertEqual([c.task_ids for c in s.conflicts], [("a", "c")])
        self.assertFalse(s.dirty)

    def test_select_hover_and_panel(self) -> None:
        s = _state()
        s = reduce(s, Command(CommandKind.SELECT, "a"))
        s = reduce(s, Command(CommandKind.HOVER, "b"))
        self.assertEqual((s.active_task_id, s.hovered_task_id), ("a", "b"))
        self.assertEqual(s.active_task, A)
        s = reduce(s, Command(CommandKind.TOGGLE_PANEL))
        self.assertTrue(s.panel_open)
        s = reduce(s, Command(CommandKind.TOGGLE_PANEL))
        self.assertFalse(s.panel_open)
        s = reduce(s, Command(CommandKind.TOGGLE_PANEL, True))
        self.assertTrue(s.panel_open)
        self.assertIsNone(reduce(s, Command(CommandKind.SELECT, None)).active_task_id)

    def test_update_recomputes_conflicts_and_does_not_mutate_input(self) -> None:
        before = _state()
        self.assertEqual(before.conflicts, ())
        moved = Task(id="b", name="B", start="2025-10-12", end="2025-10-14", lane_id="lane-a")
        after = reduce(before, Command(CommandKind.UPDATE_TASK, moved))
        self.assertEqual([c.task_ids for c in after.conflicts], [("a", "b")])
        self.assertTrue(after.dirty)
        self.assertEqual(before.task("b"), B)
        self.assertEqual(before.conflicts, ())

    def test_milestones_are_normalized_on_update(self) -> None:
        m = Task(id="a", name="A", start="2025-10-10", end="2025-10-15", lane_id="lane-a", milestone=True)
        s = reduce(_state(), Command(CommandKind.UPDATE_TASK, m))
        self.assertEqual(s.task("a").end, "2025-10-10")  # type: ignore[union-attr]

    def test_create_selects_and_opens_panel(self) -> None:
        c = Task(id="c", name="C", start="2025-10-21", end="2025-10-23", lane_id="lane-a")
        s = reduce(_state(), Command(CommandKind.CREATE_TASK, c))
        self.assertEqual(s.active_task_id, "c")
        self.assertTrue(s.panel_open)
        self.assertEqual([t.id for t in s.tasks], ["a", "b", "c"])
        self.assertEqual([x.task_ids for x in s.conflicts], [("b", "c")])

    def test_delete_clears_active_selection(self) -> None:
        s = reduce(_state(), Command(CommandKind.SELECT, "a"))
        s = reduce(s, Command(CommandKind.DELETE_TASK, "a"))
        self.assertIsNone(s.active_task_id)
        self.assertEqual([t.id for t in s.tasks], ["b"])

        s = reduce(reduce(_state(), Command(CommandKind.SELECT, "a")), Command(CommandKind.DELETE_TASK, "b"))
        self.assertEqual(s.active_task_id, "a")

    def test_set_tasks_and_lanes(self) -> None:
        s = reduce(_state(), Command(CommandKind.SET_TASKS, (B,)))
        self.assertEqual(s.tasks, (B,))
        s = reduce(s, Command(CommandKind.SET_LANES, (Lane("lane-z", "Z"),)))
        self.assertEqual([lane.id for lane in s.lanes], ["lane-z"])

    def test_unchanged_zoom_and_density_return_same_state(self) -> None:
        s = _state()
        self.assertIs(reduce(s, Command(CommandKind.SET_ZOOM, "month")), s)
        self.assertIs(reduce(s, Command(CommandKind.SET_ZOOM, "bogus")), s)
        self.assertIs(reduce(s, Command(CommandKind.SET_DENSITY, "comfortable")), s)
        self.assertEqual(reduce(s, Command(CommandKind.SET_ZOOM, "week")).zoom, "week")
        self.assertEqual(reduce(s, Command(CommandKind.SET_DENSITY, "compact")).density, "compact")


class TestNewTaskDraftContract(unittest.TestCase):
    def test_span_depends_on_zoom(self) -> None:
        expected = {"week": "2025-10-12", "month": "2025-10-15", "quarter": "2025-10-24", "year": "2025-11-09"}
        for zoom, end in expected.items():
            t = new_task_draft(LANES, zoom, today="2025-10-10", task_id="n")
            self.assertEqual((t.start, t.end, t.lane_id, t.name), ("2025-10-10", end, "lane-a", "New Task"))

    def test_requires_a_lane(self) -> None:
        with self.assertRaises(NoLanesError):
            new_task_draft([], "month", today="2025-10-10")
        self.assertTrue(issubclass(NoLanesError, ValueError))


if __name__ == "__main__":
    unittest.main(verbosity=2)
