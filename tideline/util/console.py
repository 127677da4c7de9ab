# tideline/util/console.py
from __future__ import annotations

import os
import sys
from typing import Any


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def obs_enabled() -> bool:
    v = (os.getenv("TIDELINE_OBS_LOG", "") or "").strip().lower()
    return v in {"1", "true", "yes", "on"}


def warn(scope: str, msg: str, *, always: bool = False) -> None:
    """Emit `[tideline.<scope>] WARN: <msg>` on stderr.

    Diagnostic warnings are gated by TIDELINE_OBS_LOG unless `always` is set.
    """
    if always or obs_enabled():
        eprint(f"[tideline.{scope}] WARN: {msg}")
