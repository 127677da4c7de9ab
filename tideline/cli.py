from __future__ import annotations

import argparse
import dataclasses
import json
import os
import sys
from pathlib import Path

from .api import layout_report
from .model import ZOOM_LEVELS, DENSITIES
from .schema import normalize_density, normalize_zoom, parse_imported_timeline
from .storage import JsonFileStore, seed_snapshot
from .util.dates import parse_date, today_iso
from .validate import SnapshotValidationError


def main(argv: list[str] | None = None) -> int:
    default_out = os.path.join("build", "tideline_layout.json")
    ap = argparse.ArgumentParser(
        prog="tideline",
        description="Compute the timeline layout (window, lane rows, bar rectangles, conflicts) as JSON.",
    )
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--in", dest="in_json", default=None, help="Snapshot JSON to lay out")
    src.add_argument("--state", action="store_true", help="Use the persisted state file (env TIDELINE_STATE)")
    src.add_argument("--seed", action="store_true", help="Use the built-in demo timeline (default)")
    ap.add_argument(
        "--zoom",
        default=os.getenv("TIDELINE_ZOOM") or None,
        help=f"Override zoom ({'|'.join(ZOOM_LEVELS)}; default: env TIDELINE_ZOOM or snapshot value)",
    )
    ap.add_argument(
        "--density",
        default=os.getenv("TIDELINE_DENSITY") or None,
        help=f"Override density ({'|'.join(DENSITIES)}; default: env TIDELINE_DENSITY or snapshot value)",
    )
    ap.add_argument(
        "--today",
        default=os.getenv("TIDELINE_TODAY") or None,
        help="Fixed 'today' YYYY-MM-DD (default: env TIDELINE_TODAY or the system date)",
    )
    ap.add_argument("--out", default=default_out, help="Output JSON path, or '-' for stdout (default: ./build/tideline_layout.json)")
    args = ap.parse_args(argv)

    today = None
    if args.today:
        try:
            today = today_iso(parse_date(args.today))
        except ValueError as e:
            raise SystemExit(f"Invalid --today value: {e}")

    if args.in_json:
        p = Path(args.in_json)
        if not p.exists():
            raise SystemExit(f"Missing snapshot file: {p}")
        try:
            snapshot = parse_imported_timeline(p.read_text(encoding="utf-8"))
        except SnapshotValidationError as e:
            raise SystemExit(str(e))
    elif args.state:
        snapshot = JsonFileStore().load()
    else:
        snapshot = seed_snapshot()

    if args.zoom or args.density:
        snapshot = dataclasses.replace(
            snapshot,
            zoom=normalize_zoom(args.zoom) if args.zoom else snapshot.zoom,
            density=normalize_density(args.density) if args.density else snapshot.density,
        )

    report = layout_report(snapshot, today=today)
    text = json.dumps(report, ensure_ascii=False, indent=2) + "\n"

    if args.out == "-":
        sys.stdout.write(text)
        return 0

    out_path = Path(os.path.abspath(args.out))
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8")
    print(f"Wrote: {out_path}")
    print(f"Window: {report['window']['start']} .. {report['window']['end']} ({report['window']['days']} days)")
    print(f"Conflicts: {len(report['conflicts'])}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
