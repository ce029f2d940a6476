"""Time-tracking session driving open time entries."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from .analytics import round_half_away
from .exceptions import PreconditionError, RepositoryError, ValidationError
from .models import TimeEntry, to_local_naive
from .repository import TimeEntryRepository
from .settings import Settings
from .timer_state import (
    IDLE,
    Pause,
    Paused,
    Resume,
    Running,
    Started,
    Stopped,
    Tick,
    TimerEvent,
    TimerState,
    active_entry_id,
    apply_event,
    elapsed_seconds,
)

DEFAULT_TICK_INTERVAL_MS = 1000
DEFAULT_RECENT_ENTRIES = 10


class TimerSession(QObject):
    """Owns at most one open time entry for a user and counts elapsed seconds.

    The elapsed counter advances once per tick and only while running. Local
    state changes only after the repository confirms the matching write, so
    the session always mirrors what has been persisted.
    """

    state_changed: Signal = Signal(object)
    elapsed_changed: Signal = Signal(int)
    entry_started: Signal = Signal(object)
    entry_stopped: Signal = Signal(object)
    error_occurred: Signal = Signal(object)

    def __init__(
        self,
        user_id: str,
        repository: TimeEntryRepository,
        tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        clock: Callable[[], datetime] = datetime.now,
        logger: Optional[logging.Logger] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._user_id = user_id
        self._repository = repository
        self._clock = clock
        self._logger = logger or logging.getLogger("taskpulse.timer")
        self._state: TimerState = IDLE
        self._timer = QTimer(self)
        self._timer.setInterval(tick_interval_ms)
        self._timer.timeout.connect(self.tick)
        self._recent_limit = DEFAULT_RECENT_ENTRIES

    @classmethod
    def from_settings(
        cls,
        user_id: str,
        repository: TimeEntryRepository,
        settings: Settings,
        **kwargs,
    ) -> "TimerSession":
        session = cls(user_id, repository, tick_interval_ms=settings.tick_interval_ms, **kwargs)
        session._recent_limit = settings.recent_entries_limit
        return session

    # ------------------------------------------------------------------
    @property
    def tick_interval_ms(self) -> int:
        return self._timer.interval()

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def elapsed_seconds(self) -> int:
        return elapsed_seconds(self._state)

    @property
    def active_entry_id(self) -> Optional[str]:
        return active_entry_id(self._state)

    @property
    def is_running(self) -> bool:
        return isinstance(self._state, Running)

    @property
    def is_paused(self) -> bool:
        return isinstance(self._state, Paused)

    @property
    def is_ticking(self) -> bool:
        return self._timer.isActive()

    def start(self, task_id: str | None) -> TimeEntry:
        task_id = (task_id or "").strip()
        if not task_id:
            raise ValidationError("Select a task to track time for")
        if self.active_entry_id is not None:
            raise PreconditionError("A time entry is already open")

        start_time = to_local_naive(self._clock())
        try:
            entry = self._repository.insert(
                {"user_id": self._user_id, "task_id": task_id, "start_time": start_time}
            )
        except RepositoryError as exc:
            self._logger.exception(
                "Failed to open time entry",
                extra={"event": "timer_start_failed", "task_id": task_id},
            )
            self.error_occurred.emit(exc)
            raise

        self._transition(Started(entry))
        self._timer.start()
        self._logger.info(
            "Timer started",
            extra={
                "event": "timer_start",
                "task_id": task_id,
                "entry_id": entry.id,
                "start": entry.start_time.isoformat(),
            },
        )
        self.entry_started.emit(entry)
        return entry

    def pause(self) -> None:
        if self.is_paused:
            return
        self._transition(Pause())
        self._timer.stop()
        self._logger.info(
            "Timer paused",
            extra={"event": "timer_pause", "entry_id": self.active_entry_id, "elapsed": self.elapsed_seconds},
        )

    def resume(self) -> None:
        self._transition(Resume())
        self._timer.start()
        self._logger.info(
            "Timer resumed",
            extra={"event": "timer_resume", "entry_id": self.active_entry_id, "elapsed": self.elapsed_seconds},
        )

    def stop(self) -> TimeEntry:
        state = self._state
        if not isinstance(state, (Running, Paused)):
            raise PreconditionError("No time entry is open")

        duration = state.elapsed_seconds
        end_time = max(to_local_naive(self._clock()), state.start_time)
        open_entry = TimeEntry(task_id=state.task_id, start_time=state.start_time, id=state.entry_id)
        closed = open_entry.close(end_time, duration)
        try:
            entry = self._repository.update(state.entry_id, {"end_time": closed.end_time, "duration": closed.duration})
        except RepositoryError as exc:
            self._logger.exception(
                "Failed to close time entry",
                extra={"event": "timer_stop_failed", "entry_id": state.entry_id, "duration": duration},
            )
            self.error_occurred.emit(exc)
            raise

        self._timer.stop()
        self._transition(Stopped(entry))
        self._logger.info(
            "Timer stopped",
            extra={
                "event": "timer_stop",
                "entry_id": entry.id,
                "task_id": entry.task_id,
                "duration": entry.duration,
            },
        )
        self.entry_stopped.emit(entry)
        return entry

    def tick(self) -> None:
        if not self.is_running:
            return
        self._state = apply_event(self._state, Tick())
        self.elapsed_changed.emit(self.elapsed_seconds)

    def shutdown(self) -> None:
        """Cancel the pending tick; the open entry, if any, stays persisted as open."""
        if self._timer.isActive():
            self._timer.stop()
            self._logger.info(
                "Timer tick cancelled on shutdown",
                extra={"event": "timer_shutdown", "entry_id": self.active_entry_id},
            )

    def recent_entries(self, limit: Optional[int] = None) -> list[TimeEntry]:
        if limit is None:
            limit = self._recent_limit
        try:
            entries: Sequence[TimeEntry] = self._repository.list(self._user_id, limit=limit)
        except RepositoryError:
            self._logger.exception("Failed to load recent time entries", extra={"event": "timer_recent_failed"})
            raise
        return list(entries)[:limit]

    def estimate_progress(self, estimated_minutes: Optional[int]) -> Optional[int]:
        """Percentage of ``estimated_minutes`` already tracked in this session."""
        if not estimated_minutes:
            return None
        return round_half_away(self.elapsed_seconds / 60 / estimated_minutes * 100)

    # ------------------------------------------------------------------
    def _transition(self, event: TimerEvent) -> None:
        self._state = apply_event(self._state, event)
        self._logger.debug(
            "Timer state changed",
            extra={"event": "timer_state", "state": type(self._state).__name__},
        )
        self.state_changed.emit(self._state)
