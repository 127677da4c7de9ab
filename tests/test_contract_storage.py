from __future__ import annotations

import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr
from pathlib import Path
from unittest.mock import patch

from tideline.model import Lane, TimelineSnapshot
from tideline.storage import JsonFileStore, default_state_path, seed_snapshot


class TestJsonFileStoreContract(unittest.TestCase):
    def test_missing_file_loads_seed(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            store = JsonFileStore(Path(td) / "state.json")
            self.assertEqual(store.load(), seed_snapshot())

    def test_corrupt_or_invalid_file_falls_back_with_warning(self) -> None:
        for content in ("{not json", '{"lanes": 3, "tasks": []}'):
            with tempfile.TemporaryDirectory() as td:
                p = Path(td) / "state.json"
                p.write_text(content, encoding="utf-8")
                buf = io.StringIO()
                with redirect_stderr(buf):
                    snap = JsonFileStore(p).load()
                self.assertEqual(snap, seed_snapshot())
                self.assertIn("[tideline.storage] WARN:", buf.getvalue())

    def test_persist_then_load(self) -> None:
        snap = TimelineSnapshot(lanes=(Lane("x", "X"),), tasks=(), zoom="year", density="spacious")
        with tempfile.TemporaryDirectory() as td:
            store = JsonFileStore(Path(td) / "nested" / "state.json")
            store.persist(snap)
            self.assertEqual(store.load(), snap)
            store.reset()
            self.assertFalse(store.path.exists())
            store.reset()
            self.assertEqual(store.load(), seed_snapshot())

    def test_persist_failure_is_reported_not_raised(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            blocker = Path(td) / "blocker"
            blocker.write_text("file, not a directory", encoding="utf-8")
            buf = io.StringIO()
            with redirect_stderr(buf):
                JsonFileStore(blocker / "state.json").persist(seed_snapshot())
            self.assertIn("failed to persist", buf.getvalue())

    def test_default_path_from_env(self) -> None:
        with patch.dict(os.environ, {"TIDELINE_STATE": "/tmp/custom-state.json"}):
            self.assertEqual(default_state_path(), Path("/tmp/custom-state.json"))
            self.assertEqual(JsonFileStore().path, Path("/tmp/custom-state.json"))

    def test_seed_has_lanes_tasks_and_a_milestone(self) -> None:
        seed = seed_snapshot()
        self.assertGreaterEqual(len(seed.lanes), 1)
        self.assertTrue(any(t.milestone and t.start == t.end for t in seed.tasks))
        lane_ids = {lane.id for lane in seed.lanes}
        self.assertTrue(all(t.lane_id in lane_ids for t in seed.tasks))


if __name__ == "__main__":
    unittest.main(verbosity=2)
