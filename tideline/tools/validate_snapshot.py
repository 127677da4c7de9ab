#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from tideline.validate import validate_snapshot

TOOL = "tideline-validate-snapshot"


def _die(msg: str, rc: int = 2) -> int:
    print(f"[{TOOL}] ERROR: {msg}", file=sys.stderr)
    return rc


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog=TOOL,
        description="Validate the structure of a timeline snapshot JSON file (lanes, tasks, dates).",
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Snapshot JSON path")
    ns = ap.parse_args(argv)

    p = Path(ns.in_json)
    if not p.exists():
        return _die(f"Missing JSON file: {p}")
    try:
        payload = json.loads(p.read_text(encoding="utf-8", errors="replace"))
    except ValueError as e:
        return _die(f"Failed to parse JSON: {p} ({e})")

    errs = validate_snapshot(payload, label=f"json:{p}")
    if errs:
        print(f"[{TOOL}] FAIL", file=sys.stderr)
        for e in errs:
            print(f"  - {e}", file=sys.stderr)
        return 2

    print(f"[{TOOL}] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
