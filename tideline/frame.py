# tideline/frame.py
from __future__ import annotations

from typing import Any, Callable, Dict, Hashable, List, Tuple


class NextTickScheduler:
    """Defers visual application of already-computed state to the next paint tick.

    Only paint callbacks go through here; state transitions never do. Requests
    sharing a key are coalesced to the most recent one (a newer preview
    supersedes an older one that was never painted). Requests run in the order
    their key was first queued.
    """

    def __init__(self) -> None:
        self._pending: Dict[Hashable, Tuple[Callable[..., Any], tuple]] = {}

    def request(self, key: Hashable, callback: Callable[..., Any], *args: Any) -> None:
        self._pending[key] = (callback, args)

    def cancel(self, key: Hashable) -> None:
        self._pending.pop(key, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def flush(self) -> int:
        """Run everything queued so far; returns how many callbacks ran."""
        batch: List[Tuple[Callable[..., Any], tuple]] = list(self._pending.values())
        self._pending.clear()
        for callback, args in batch:
            callback(*args)
        return len(batch)


class ImmediateScheduler(NextTickScheduler):
    """Scheduler that paints synchronously (headless use and tests)."""

    def request(self, key: Hashable, callback: Callable[..., Any], *args: Any) -> None:
        callback(*args)
