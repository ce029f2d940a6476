"""Timer states and the transitions between them.

A session is always exactly one of :class:`Idle`, :class:`Running` or
:class:`Paused`. :func:`apply_event` maps ``(state, event)`` to the next state
and raises :class:`PreconditionError` for transitions that cannot happen, so
combinations such as "paused without an open entry" are unrepresentable.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Union

from .exceptions import PreconditionError
from .models import TimeEntry


@dataclass(frozen=True, slots=True)
class Idle:
    pass


@dataclass(frozen=True, slots=True)
class Running:
    task_id: str
    entry_id: str
    start_time: datetime
    elapsed_seconds: int = 0


@dataclass(frozen=True, slots=True)
class Paused:
    task_id: str
    entry_id: str
    start_time: datetime
    elapsed_seconds: int = 0


TimerState = Union[Idle, Running, Paused]


@dataclass(frozen=True, slots=True)
class Started:
    entry: TimeEntry


@dataclass(frozen=True, slots=True)
class Tick:
    seconds: int = 1


@dataclass(frozen=True, slots=True)
class Pause:
    pass


@dataclass(frozen=True, slots=True)
class Resume:
    pass


@dataclass(frozen=True, slots=True)
class Stopped:
    entry: TimeEntry


TimerEvent = Union[Started, Tick, Pause, Resume, Stopped]

IDLE = Idle()


def apply_event(state: TimerState, event: TimerEvent) -> TimerState:
    if isinstance(event, Started):
        if not isinstance(state, Idle):
            raise PreconditionError("A time entry is already open")
        if not event.entry.is_open:
            raise PreconditionError("Cannot start from a closed time entry")
        return Running(
            task_id=event.entry.task_id,
            entry_id=event.entry.id,
            start_time=event.entry.start_time,
        )

    if isinstance(event, Tick):
        if isinstance(state, Running):
            return replace(state, elapsed_seconds=state.elapsed_seconds + max(0, event.seconds))
        # Ticks outside Running never advance the counter.
        return state

    if isinstance(event, Pause):
        if isinstance(state, Running):
            return Paused(state.task_id, state.entry_id, state.start_time, state.elapsed_seconds)
        if isinstance(state, Paused):
            return state
        raise PreconditionError("No timer is running")

    if isinstance(event, Resume):
        if isinstance(state, Paused):
            return Running(state.task_id, state.entry_id, state.start_time, state.elapsed_seconds)
        raise PreconditionError("Timer is not paused")

    if isinstance(event, Stopped):
        if isinstance(state, Idle):
            raise PreconditionError("No time entry is open")
        if event.entry.id != state.entry_id:
            raise PreconditionError("Stopped entry does not match the active entry")
        if not event.entry.is_closed:
            raise PreconditionError("Time entry was not closed")
        return IDLE

    raise TypeError(f"Unknown timer event: {event!r}")


def active_entry_id(state: TimerState) -> str | None:
    if isinstance(state, (Running, Paused)):
        return state.entry_id
    return None


def elapsed_seconds(state: TimerState) -> int:
    if isinstance(state, (Running, Paused)):
        return state.elapsed_seconds
    return 0
