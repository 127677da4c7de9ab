#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from tideline.schema import export_timeline, parse_imported_timeline
from tideline.validate import SnapshotValidationError

TOOL = "tideline-export-snapshot"


def _die(msg: str, rc: int = 2) -> int:
    print(f"[{TOOL}] ERROR: {msg}", file=sys.stderr)
    return rc


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=TOOL,
        description="Re-serialize a snapshot as a pretty-printed export named timeline-<zoom>-<timestamp>.json.",
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Snapshot JSON path")
    ap.add_argument("--dir", dest="out_dir", default="build", help="Output directory (default: ./build)")
    ns = ap.parse_args(argv)

    p = Path(ns.in_json)
    if not p.exists():
        return _die(f"Missing JSON file: {p}")
    try:
        snapshot = parse_imported_timeline(p.read_text(encoding="utf-8"))
    except SnapshotValidationError as e:
        return _die(str(e))

    try:
        out = export_timeline(snapshot, ns.out_dir)
    except OSError as e:
        return _die(f"Failed to write export: {e}")

    print(f"[{TOOL}] wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
