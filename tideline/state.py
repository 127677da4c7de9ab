# tideline/state.py
"""Timeline state: a pure reducer plus a small store that serializes commands.

The reducer never mutates its input. Every task-set command recomputes the
conflict list before returning, so anything reading the new state sees
conflicts that match its tasks.
"""
from __future__ import annotations

import dataclasses
import enum
import weakref
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, List, Optional, Protocol, Sequence, Tuple

from .drag import DragController
from .frame import NextTickScheduler
from .geometry import TimelineDerived, derive_timeline
from .model import DEFAULT_DENSITY, DEFAULT_ZOOM, Conflict, Lane, Task, TimelineSnapshot
from .planner import detect_conflicts, op_move_lane, op_nudge
from .schema import normalize_density, normalize_zoom
from .util.console import warn
from .util.dates import DateLike, add_days, today_iso

NEW_TASK_SPAN_DAYS = {"week": 2, "month": 5, "quarter": 14, "year": 30}


class NoLanesError(ValueError):
    """Raised when a task is created while the timeline has no lanes."""


class CommandKind(enum.Enum):
    HYDRATE = "hydrate"
    SELECT = "select"
    HOVER = "hover"
    TOGGLE_PANEL = "toggle_panel"
    UPDATE_TASK = "update_task"
    CREATE_TASK = "create_task"
    DELETE_TASK = "delete_task"
    SET_TASKS = "set_tasks"
    SET_LANES = "set_lanes"
    SET_ZOOM = "set_zoom"
    SET_DENSITY = "set_density"


@dataclass(frozen=True)
class Command:
    """One state transition request; `payload` depends on `kind`.

    HYDRATE: TimelineSnapshot; SELECT/HOVER: task id or None;
    TOGGLE_PANEL: bool or None (flip); UPDATE_TASK/CREATE_TASK: Task;
    DELETE_TASK: task id; SET_TASKS: sequence of Task; SET_LANES: sequence
    of Lane; SET_ZOOM/SET_DENSITY: str.
    """

    kind: CommandKind
    payload: Any = None


@dataclass(frozen=True)
class TimelineState:
    lanes: Tuple[Lane, ...] = ()
    tasks: Tuple[Task, ...] = ()
    zoom: str = DEFAULT_ZOOM
    density: str = DEFAULT_DENSITY
    active_task_id: Optional[str] = None
    hovered_task_id: Optional[str] = None
    panel_open: bool = False
    dirty: bool = False
    conflicts: Tuple[Conflict, ...] = ()

    @classmethod
    def from_snapshot(cls, snapshot: TimelineSnapshot) -> "TimelineState":
        return cls(
            lanes=tuple(snapshot.lanes),
            tasks=tuple(snapshot.tasks),
            zoom=normalize_zoom(snapshot.zoom),
            density=normalize_density(snapshot.density),
            conflicts=tuple(detect_conflicts(snapshot.tasks)),
        )

    def to_snapshot(self) -> TimelineSnapshot:
        return TimelineSnapshot(lanes=self.lanes, tasks=self.tasks, zoom=self.zoom, density=self.density)

    def task(self, task_id: Optional[str]) -> Optional[Task]:
        if not task_id:
            return None
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    @property
    def active_task(self) -> Optional[Task]:
        return self.task(self.active_task_id)


def normalize_milestone(task: Task) -> Task:
    if task.milestone and task.end != task.start:
        return dataclasses.replace(task, end=task.start)
    return task


def _with_tasks(state: TimelineState, tasks: Sequence[Task], **changes: Any) -> TimelineState:
    items = tuple(tasks)
    return dataclasses.replace(
        state,
        tasks=items,
        conflicts=tuple(detect_conflicts(items)),
        dirty=True,
        **changes,
    )


def reduce(state: TimelineState, command: Command) -> TimelineState:
    kind = command.kind
    payload = command.payload

    if kind is CommandKind.HYDRATE:
        snap: TimelineSnapshot = payload
        for t in snap.tasks:
            if t.milestone and t.start != t.end:
                warn("state", f"hydrated milestone {t.id!r} spans {t.start}..{t.end}")
        # selection, hover and the panel start fresh
        return TimelineState.from_snapshot(snap)

    if kind is CommandKind.SELECT:
        return dataclasses.replace(state, active_task_id=payload or None)

    if kind is CommandKind.HOVER:
        return dataclasses.replace(state, hovered_task_id=payload or None)

    if kind is CommandKind.TOGGLE_PANEL:
        panel_open = (not state.panel_open) if payload is None else bool(payload)
        return dataclasses.replace(state, panel_open=panel_open)

    if kind is CommandKind.UPDATE_TASK:
        updated = normalize_milestone(payload)
        if updated is not payload:
            warn("state", f"milestone {updated.id!r} end snapped to {updated.start}")
        return _with_tasks(state, [updated if t.id == updated.id else t for t in state.tasks])

    if kind is CommandKind.CREATE_TASK:
        created = normalize_milestone(payload)
        return _with_tasks(
            state,
            list(state.tasks) + [created],
            active_task_id=created.id,
            panel_open=True,
        )

    if kind is CommandKind.DELETE_TASK:
        remaining = [t for t in state.tasks if t.id != payload]
        active = None if state.active_task_id == payload else state.active_task_id
        hovered = None if state.hovered_task_id == payload else state.hovered_task_id
        return _with_tasks(state, remaining, active_task_id=active, hovered_task_id=hovered)

    if kind is CommandKind.SET_TASKS:
        return _with_tasks(state, [normalize_milestone(t) for t in payload])

    if kind is CommandKind.SET_LANES:
        return dataclasses.replace(state, lanes=tuple(payload), dirty=True)

    if kind is CommandKind.SET_ZOOM:
        zoom = normalize_zoom(payload)
        if zoom == state.zoom:
            return state
        return dataclasses.replace(state, zoom=zoom, dirty=True)

    if kind is CommandKind.SET_DENSITY:
        density = normalize_density(payload)
        if density == state.density:
            return state
        return dataclasses.replace(state, density=density, dirty=True)

    raise ValueError(f"Unknown command: {kind!r}")


def data_changed(prev: TimelineState, nxt: TimelineState) -> bool:
    """True when anything that belongs in a snapshot differs."""
    return (
        prev.lanes != nxt.lanes
        or prev.tasks != nxt.tasks
        or prev.zoom != nxt.zoom
        or prev.density != nxt.density
    )


def new_task_draft(
    lanes: Sequence[Lane],
    zoom: str = DEFAULT_ZOOM,
    *,
    today: Optional[DateLike] = None,
    task_id: Optional[str] = None,
) -> Task:
    """A fresh "New Task" starting today in the first lane."""
    if not lanes:
        raise NoLanesError("Cannot create a task without any lanes")
    start = today_iso(today)
    span = NEW_TASK_SPAN_DAYS.get(normalize_zoom(zoom), NEW_TASK_SPAN_DAYS[DEFAULT_ZOOM])
    return Task(
        id=task_id or f"task-{start}",
        name="New Task",
        start=start,
        end=add_days(start, span),
        lane_id=lanes[0].id,
    )


class Persistence(Protocol):
    def persist(self, snapshot: TimelineSnapshot) -> None: ...


Listener = Callable[[TimelineState], None]


class TimelineStore:
    """Owns the timeline state and applies commands one at a time.

    A command dispatched while another is being applied (for example from a
    subscriber) is queued and applied after the current one finishes.
    """

    def __init__(
        self,
        snapshot: Optional[TimelineSnapshot] = None,
        *,
        persistence: Optional[Persistence] = None,
        today: Optional[DateLike] = None,
        seed: Optional[Callable[[], TimelineSnapshot]] = None,
    ) -> None:
        self._state = TimelineState.from_snapshot(snapshot) if snapshot is not None else TimelineState()
        self._persistence = persistence
        self._today = today
        self._seed = seed
        self._listeners: List[Listener] = []
        self._queue: Deque[Command] = deque()
        self._applying = False
        self._created = 0
        self._controllers: "weakref.WeakSet[DragController]" = weakref.WeakSet()
        self._derived = self._derive()

    # -------------------- read side --------------------
    @property
    def state(self) -> TimelineState:
        return self._state

    @property
    def derived(self) -> TimelineDerived:
        return self._derived

    def _derive(self) -> TimelineDerived:
        s = self._state
        return derive_timeline(
            s.tasks,
            s.lanes,
            s.zoom,
            s.density,
            today=self._today,
            conflicts=list(s.conflicts),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -------------------- command channel --------------------
    def dispatch(self, command: Command) -> TimelineState:
        self._queue.append(command)
        if self._applying:
            return self._state

        self._applying = True
        try:
            while self._queue:
                self._apply(self._queue.popleft())
        finally:
            self._applying = False
            self._queue.clear()
        return self._state

    def _apply(self, command: Command) -> None:
        prev = self._state
        nxt = reduce(prev, command)
        if nxt is prev:
            return
        self._state = nxt
        self._derived = self._derive()
        if nxt.dirty and data_changed(prev, nxt):
            self._persist(nxt)
        for controller in list(self._controllers):
            controller.set_geometry(self._derived.geometry)
        for listener in list(self._listeners):
            listener(nxt)

    # -------------------- actions --------------------
    def hydrate(self, snapshot: TimelineSnapshot) -> TimelineState:
        return self.dispatch(Command(CommandKind.HYDRATE, snapshot))

    def select_task(self, task_id: Optional[str]) -> TimelineState:
        return self.dispatch(Command(CommandKind.SELECT, task_id))

    def hover_task(self, task_id: Optional[str]) -> TimelineState:
        return self.dispatch(Command(CommandKind.HOVER, task_id))

    def toggle_panel(self, open_: Optional[bool] = None) -> TimelineState:
        return self.dispatch(Command(CommandKind.TOGGLE_PANEL, open_))

    def update_task(self, task: Task) -> TimelineState:
        return self.dispatch(Command(CommandKind.UPDATE_TASK, task))

    def create_task(self, task: Optional[Task] = None) -> Task:
        if task is None:
            self._created += 1
            draft_id = f"task-{today_iso(self._today)}-{self._created}"
            while self._state.task(draft_id) is not None:
                self._created += 1
                draft_id = f"task-{today_iso(self._today)}-{self._created}"
            task = new_task_draft(self._state.lanes, self._state.zoom, today=self._today, task_id=draft_id)
        self.dispatch(Command(CommandKind.CREATE_TASK, task))
        return self._state.task(task.id) or task

    def delete_task(self, task_id: str) -> TimelineState:
        return self.dispatch(Command(CommandKind.DELETE_TASK, task_id))

    def set_tasks(self, tasks: Sequence[Task]) -> TimelineState:
        return self.dispatch(Command(CommandKind.SET_TASKS, tuple(tasks)))

    def set_lanes(self, lanes: Sequence[Lane]) -> TimelineState:
        return self.dispatch(Command(CommandKind.SET_LANES, tuple(lanes)))

    def set_zoom(self, zoom: str) -> TimelineState:
        return self.dispatch(Command(CommandKind.SET_ZOOM, zoom))

    def set_density(self, density: str) -> TimelineState:
        return self.dispatch(Command(CommandKind.SET_DENSITY, density))

    def import_snapshot(self, snapshot: TimelineSnapshot) -> TimelineState:
        """Replace lanes, tasks, zoom and density in one command, then persist."""
        state = self.hydrate(snapshot)
        self._persist(state)
        return state

    def reset_to_seed(self) -> TimelineState:
        if self._seed is None:
            raise ValueError("No seed snapshot configured")
        state = self.hydrate(self._seed())
        self._persist(state)
        return state

    def _persist(self, state: TimelineState) -> None:
        if self._persistence is not None:
            self._persistence.persist(state.to_snapshot())

    def nudge_task(self, task_id: str, days: int) -> Optional[Task]:
        task = self._state.task(task_id)
        if task is None:
            return None
        updated = op_nudge(task, days)
        if updated is not None:
            self.update_task(updated)
        return updated

    def move_task_to_lane(self, task_id: str, direction: str) -> Optional[Task]:
        task = self._state.task(task_id)
        if task is None:
            return None
        updated = op_move_lane(task, self._state.lanes, direction)
        if updated is not None:
            self.update_task(updated)
        return updated

    # -------------------- drag wiring --------------------
    def drag_controller(
        self,
        *,
        on_preview: Optional[Callable[..., None]] = None,
        scheduler: Optional[NextTickScheduler] = None,
    ) -> DragController:
        """Controller reading live tasks and geometry from this store.

        The store keeps only a weak reference, so dropped controllers go away.
        """
        controller = DragController(
            lambda task_id: self._state.task(task_id),
            self._derived.geometry,
            update_task=self.update_task,
            select_task=self.select_task,
            on_preview=on_preview,
            scheduler=scheduler,
        )
        self._controllers.add(controller)
        return controller
