#!/usr/bin/env python3
"""Replay a recorded pointer gesture through the drag controller.

Gesture file: a JSON list of events (or {"events": [...]}), each

    {"phase": "start"|"move"|"end"|"cancel", "taskId": str, "kind": str,
     "deltaX": number, "overLaneId": str|null}

Output: {"snapshot": <resulting snapshot>, "mutations": [<task>...], "previews": [...]}
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

from tideline.model import PointerEvent, Task
from tideline.schema import parse_imported_timeline
from tideline.state import TimelineStore
from tideline.validate import SnapshotValidationError

TOOL = "tideline-replay-drag"


def _die(msg: str, rc: int = 2) -> int:
    print(f"[{TOOL}] ERROR: {msg}", file=sys.stderr)
    return rc


def _load_events(raw: Any) -> List[PointerEvent]:
    if isinstance(raw, dict):
        raw = raw.get("events")
    if not isinstance(raw, list):
        raise ValueError("gesture must be a list of events (or {\"events\": [...]})")

    out: List[PointerEvent] = []
    for i, ev in enumerate(raw):
        if not isinstance(ev, dict):
            raise ValueError(f"events[{i}] must be object")
        phase = ev.get("phase")
        if phase not in ("start", "move", "end", "cancel"):
            raise ValueError(f"events[{i}].phase invalid: {phase!r}")
        out.append(
            PointerEvent(
                phase=phase,
                task_id=ev.get("taskId"),
                kind=ev.get("kind"),
                delta_x=float(ev.get("deltaX") or 0),
                over_lane_id=ev.get("overLaneId"),
            )
        )
    return out


def replay(store: TimelineStore, events: List[PointerEvent]) -> Dict[str, Any]:
    controller = store.drag_controller()
    mutations: List[Dict[str, Any]] = []
    previews: List[Any] = []

    for ev in events:
        result = controller.handle(ev)
        if ev.phase == "move":
            previews.append(None if result is None else {"laneId": result.lane_id, "left": result.left, "width": result.width})
        elif ev.phase == "end" and isinstance(result, Task):
            mutations.append(result.to_dict())

    return {
        "snapshot": store.state.to_snapshot().to_dict(),
        "mutations": mutations,
        "previews": previews,
    }


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog=TOOL, description="Replay a pointer gesture against a snapshot.")
    ap.add_argument("--in", dest="in_json", required=True, help="Snapshot JSON path")
    ap.add_argument("--gesture", required=True, help="Gesture events JSON path")
    ap.add_argument(
        "--today",
        default=os.getenv("TIDELINE_TODAY") or None,
        help="Fixed 'today' YYYY-MM-DD used for the window (default: env TIDELINE_TODAY or system date)",
    )
    ap.add_argument("--out", default="-", help="Output JSON path (default: stdout)")
    ns = ap.parse_args(argv)

    snap_path = Path(ns.in_json)
    gesture_path = Path(ns.gesture)
    for p in (snap_path, gesture_path):
        if not p.exists():
            return _die(f"Missing JSON file: {p}")

    try:
        snapshot = parse_imported_timeline(snap_path.read_text(encoding="utf-8"))
    except SnapshotValidationError as e:
        return _die(str(e))

    try:
        events = _load_events(json.loads(gesture_path.read_text(encoding="utf-8")))
    except ValueError as e:
        return _die(f"Invalid gesture file: {gesture_path} ({e})")

    try:
        result = replay(TimelineStore(snapshot, today=ns.today), events)
    except ValueError as e:
        return _die(str(e))

    text = json.dumps(result, ensure_ascii=False, indent=2) + "\n"
    if ns.out == "-":
        sys.stdout.write(text)
    else:
        out = Path(ns.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
        print(f"[{TOOL}] wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
