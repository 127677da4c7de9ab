from __future__ import annotations

import gc
import unittest
import weakref
from typing import List, Tuple

from tideline.model import Lane, Task, TimelineSnapshot
from tideline.state import NoLanesError, TimelineState, TimelineStore
from tideline.storage import seed_snapshot

LANES = (Lane("lane-a", "A"), Lane("lane-b", "B"))
A = Task(id="a", name="A", start="2025-10-10", end="2025-10-12", lane_id="lane-a")
B = Task(id="b", name="B", start="2025-10-20", end="2025-10-22", lane_id="lane-a")
SNAP = TimelineSnapshot(lanes=LANES, tasks=(A, B))


class _MemoryPersistence:
    def __init__(self) -> None:
        self.saved: List[TimelineSnapshot] = []

    def persist(self, snapshot: TimelineSnapshot) -> None:
        self.saved.append(snapshot)


class TestTimelineStoreContract(unittest.TestCase):
    def test_commands_dispatched_from_listeners_are_queued(self) -> None:
        store = TimelineStore(SNAP, today="2025-10-11")
        seen: List[Tuple[object, object]] = []

        def listener(state: TimelineState) -> None:
            seen.append((state.active_task_id, state.hovered_task_id))
            if state.active_task_id and state.hovered_task_id is None:
                store.hover_task(state.active_task_id)
                # nested dispatch has not been applied yet
                seen.append(("nested", store.state.hovered_task_id))

        store.subscribe(listener)
        final = store.select_task("a")
        self.assertEqual(seen, [("a", None), ("nested", None), ("a", "a")])
        self.assertEqual(final.hovered_task_id, "a")

    def test_unsubscribe(self) -> None:
        store = TimelineStore(SNAP)
        calls = []
        unsubscribe = store.subscribe(calls.append)
        store.select_task("a")
        unsubscribe()
        unsubscribe()
        store.select_task("b")
        self.assertEqual(len(calls), 1)

    def test_derived_data_follows_every_mutation(self) -> None:
        store = TimelineStore(SNAP, today="2025-10-11")
        self.assertEqual(store.derived.layouts["lane-a"].rows, 1)
        store.update_task(Task(id="b", name="B", start="2025-10-11", end="2025-10-13", lane_id="lane-a"))
        self.assertEqual(store.derived.layouts["lane-a"].rows, 2)
        self.assertEqual([c.task_ids for c in store.derived.conflicts], [("a", "b")])
        self.assertEqual(store.derived.tasks_by_id["b"].start, "2025-10-11")

    def test_persists_only_dirty_state(self) -> None:
        mem = _MemoryPersistence()
        store = TimelineStore(SNAP, persistence=mem)
        store.select_task("a")
        self.assertEqual(mem.saved, [])
        store.set_zoom("month")
        self.assertEqual(mem.saved, [])
        store.set_zoom("week")
        self.assertEqual(len(mem.saved), 1)
        self.assertEqual(mem.saved[-1].zoom, "week")

    def test_view_only_commands_never_write(self) -> None:
        mem = _MemoryPersistence()
        store = TimelineStore(SNAP, persistence=mem)
        store.set_zoom("week")
        self.assertEqual(len(mem.saved), 1)
        for task_id in ("a", "b", None, "a"):
            store.hover_task(task_id)
        store.select_task("b")
        store.toggle_panel()
        self.assertEqual(len(mem.saved), 1)

        controller = store.drag_controller()
        controller.start("a", "move")
        controller.end(0)
        self.assertEqual(len(mem.saved), 1)

    def test_hydrate_resets_selection_and_panel(self) -> None:
        store = TimelineStore(SNAP)
        store.select_task("a")
        store.hover_task("a")
        store.toggle_panel(True)
        store.hydrate(SNAP)
        self.assertEqual((store.state.active_task_id, store.state.hovered_task_id, store.state.panel_open), (None, None, False))

    def test_store_does_not_keep_dropped_controllers(self) -> None:
        store = TimelineStore(SNAP, today="2025-10-11")
        kept = store.drag_controller()
        ref = weakref.ref(store.drag_controller())
        gc.collect()
        self.assertIsNone(ref())
        store.set_density("spacious")
        self.assertEqual(kept.geometry, store.derived.geometry)

    def test_create_task_uses_draft(self) -> None:
        store = TimelineStore(SNAP, today="2025-10-10")
        created = store.create_task()
        self.assertEqual(created.id, "task-2025-10-10-1")
        self.assertEqual((created.start, created.end, created.lane_id), ("2025-10-10", "2025-10-15", "lane-a"))
        self.assertEqual(store.state.active_task_id, created.id)
        self.assertTrue(store.state.panel_open)
        self.assertEqual(store.create_task().id, "task-2025-10-10-2")

        with self.assertRaises(NoLanesError):
            TimelineStore(TimelineSnapshot(), today="2025-10-10").create_task()

    def test_delete_task(self) -> None:
        store = TimelineStore(SNAP)
        store.select_task("a")
        store.delete_task("a")
        self.assertIsNone(store.state.active_task_id)
        self.assertIsNone(store.state.task("a"))

    def test_keyboard_actions(self) -> None:
        store = TimelineStore(SNAP)
        self.assertEqual(store.nudge_task("a", 7).start, "2025-10-17")  # type: ignore[union-attr]
        self.assertIsNone(store.nudge_task("a", 0))
        self.assertIsNone(store.nudge_task("ghost", 1))
        self.assertEqual(store.move_task_to_lane("a", "down").lane_id, "lane-b")  # type: ignore[union-attr]
        self.assertIsNone(store.move_task_to_lane("a", "down"))
        self.assertEqual(store.state.task("a").lane_id, "lane-b")  # type: ignore[union-attr]

    def test_import_and_reset(self) -> None:
        mem = _MemoryPersistence()
        store = TimelineStore(SNAP, persistence=mem, seed=seed_snapshot)
        store.import_snapshot(TimelineSnapshot(lanes=LANES, tasks=(A,), zoom="year", density="spacious"))
        self.assertEqual((store.state.zoom, store.state.density), ("year", "spacious"))
        self.assertEqual([t.id for t in store.state.tasks], ["a"])
        self.assertEqual(len(mem.saved), 1)

        store.reset_to_seed()
        self.assertEqual(store.state.to_snapshot(), seed_snapshot())
        self.assertEqual(len(mem.saved), 2)

        with self.assertRaises(ValueError):
            TimelineStore(SNAP).reset_to_seed()

    def test_drag_controller_commits_through_store(self) -> None:
        store = TimelineStore(SNAP, today="2025-10-11")
        controller = store.drag_controller()
        day = controller.geometry.day_width

        controller.start("a", "move")
        self.assertEqual(store.state.active_task_id, "a")
        controller.end(day, "lane-b")

        moved = store.state.task("a")
        self.assertEqual((moved.start, moved.end, moved.lane_id), ("2025-10-11", "2025-10-13", "lane-b"))  # type: ignore[union-attr]
        self.assertEqual(store.derived.layouts["lane-b"].assignments, {"a": 0})

        store.set_zoom("week")
        self.assertEqual(controller.geometry, store.derived.geometry)
        self.assertNotEqual(controller.geometry.day_width, day)

    def test_drag_controller_sees_latest_tasks(self) -> None:
        store = TimelineStore(SNAP, today="2025-10-11")
        controller = store.drag_controller()
        store.delete_task("b")
        self.assertIsNone(controller.start("b", "move"))
        store.create_task(Task(id="c", name="C", start="2025-10-01", end="2025-10-02", lane_id="lane-a"))
        self.assertIsNotNone(controller.start("c", "resize-end"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
