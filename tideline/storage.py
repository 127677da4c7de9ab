# tideline/storage.py
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .model import TimelineSnapshot
from .schema import serialize_timeline, snapshot_from_dict
from .util.console import warn
from .validate import SnapshotValidationError

STATE_ENV = "TIDELINE_STATE"
DEFAULT_STATE_PATH = Path.home() / ".tideline" / "timeline-state-v2.json"

# Built-in demo timeline used on first run and after a reset.
SEED_PAYLOAD: Dict[str, Any] = {
    "lanes": [
        {"id": "lane-design", "name": "Design"},
        {"id": "lane-build", "name": "Build"},
        {"id": "lane-launch", "name": "Launch"},
    ],
    "tasks": [
        {
            "id": "task-research",
            "name": "User research",
            "start": "2025-10-01",
            "end": "2025-10-07",
            "laneId": "lane-design",
            "assignee": "Ada",
            "deps": [],
        },
        {
            "id": "task-wireframes",
            "name": "Wireframes",
            "start": "2025-10-06",
            "end": "2025-10-14",
            "laneId": "lane-design",
            "assignee": "Grace",
            "deps": ["task-research"],
        },
        {
            "id": "task-api",
            "name": "API skeleton",
            "start": "2025-10-08",
            "end": "2025-10-20",
            "laneId": "lane-build",
            "assignee": "Linus",
            "deps": [],
        },
        {
            "id": "task-ui",
            "name": "Timeline UI",
            "start": "2025-10-15",
            "end": "2025-10-31",
            "laneId": "lane-build",
            "assignee": "Margaret",
            "deps": ["task-wireframes", "task-api"],
        },
        {
            "id": "task-beta",
            "name": "Beta release",
            "start": "2025-11-03",
            "end": "2025-11-03",
            "laneId": "lane-launch",
            "assignee": "",
            "deps": ["task-ui"],
            "milestone": True,
        },
    ],
    "zoom": "month",
    "density": "comfortable",
}


def seed_snapshot() -> TimelineSnapshot:
    return snapshot_from_dict(json.loads(json.dumps(SEED_PAYLOAD)))


def default_state_path() -> Path:
    raw = (os.getenv(STATE_ENV) or "").strip()
    return Path(raw).expanduser() if raw else DEFAULT_STATE_PATH


class JsonFileStore:
    """Persists the timeline snapshot as a JSON file.

    Reads never fail: a missing, unreadable or structurally invalid file
    yields the seed snapshot. Write failures are reported and swallowed so an
    editing session keeps going.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else default_state_path()

    def load(self) -> TimelineSnapshot:
        if not self.path.exists():
            return seed_snapshot()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return snapshot_from_dict(raw)
        except (OSError, ValueError) as e:
            # json.JSONDecodeError and SnapshotValidationError are both ValueErrors
            kind = "invalid" if isinstance(e, SnapshotValidationError) else "unreadable"
            warn("storage", f"{kind} state file {self.path}: {e}; using seed timeline", always=True)
            return seed_snapshot()

    def persist(self, snapshot: TimelineSnapshot) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_name(self.path.name + ".tmp")
            tmp.write_text(serialize_timeline(snapshot), encoding="utf-8", newline="\n")
            os.replace(tmp, self.path)
        except OSError as e:
            warn("storage", f"failed to persist timeline to {self.path}: {e}", always=True)

    def reset(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            warn("storage", f"failed to reset {self.path}: {e}", always=True)
