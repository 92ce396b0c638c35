"""Active workout session timing.

States: NOT_STARTED -> ACTIVE <-> PAUSED -> ENDED. ENDED is terminal and
persists the elapsed time as the workout duration.
"""

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Optional

from ..clock import Clock
from ..db.repositories.workout_repository import WorkoutRepository
from ..exceptions import SessionStateError, ValidationError
from ..models.entities import Workout
from ..models.events import Change

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class WorkoutSession:
    """Tracks elapsed time for one workout while it is being performed."""

    def __init__(
        self,
        workout: Workout,
        repository: WorkoutRepository,
        clock: Optional[Clock] = None,
    ):
        self.workout = workout
        self.repository = repository
        self.clock = clock or repository.clock
        self.state = SessionState.NOT_STARTED
        self._accumulated = 0.0
        self._running_since: Optional[datetime] = None
        self._lock = threading.Lock()

    def _require(self, action: str, *allowed: SessionState) -> None:
        if self.state not in allowed:
            raise SessionStateError(current_state=self.state.value, action=action)

    def _bank_running_time(self) -> None:
        if self._running_since is not None:
            self._accumulated += (self.clock.now() - self._running_since).total_seconds()
            self._running_since = None

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed active time, excluding paused periods."""
        with self._lock:
            elapsed = self._accumulated
            if self._running_since is not None:
                elapsed += (self.clock.now() - self._running_since).total_seconds()
            return max(elapsed, 0.0)

    @property
    def is_running(self) -> bool:
        return self.state == SessionState.ACTIVE

    def start(self) -> None:
        with self._lock:
            self._require("start", SessionState.NOT_STARTED)
            self._running_since = self.clock.now()
            self.state = SessionState.ACTIVE
        logger.info(f"Session started for workout {self.workout.id}")

    def pause(self) -> None:
        with self._lock:
            self._require("pause", SessionState.ACTIVE)
            self._bank_running_time()
            self.state = SessionState.PAUSED
        logger.debug(f"Session paused for workout {self.workout.id}")

    def resume(self) -> None:
        with self._lock:
            self._require("resume", SessionState.PAUSED)
            self._running_since = self.clock.now()
            self.state = SessionState.ACTIVE
        logger.debug(f"Session resumed for workout {self.workout.id}")

    def adjust_time(self, seconds: int) -> None:
        """Overwrite the elapsed time without changing state."""
        if seconds < 0:
            raise ValidationError(
                "Invalid elapsed time: out_of_range",
                field="elapsed_time",
                reason="out_of_range",
            )
        with self._lock:
            self._require("adjust", SessionState.ACTIVE, SessionState.PAUSED)
            self._accumulated = float(seconds)
            if self._running_since is not None:
                self._running_since = self.clock.now()
        logger.debug(f"Session time for workout {self.workout.id} set to {seconds}s")

    def end(self) -> Change:
        """Stop the clock and persist the elapsed time as the workout duration.

        If persisting fails the session is left paused so ``end`` can be
        retried.
        """
        with self._lock:
            self._require("end", SessionState.ACTIVE, SessionState.PAUSED)
            self._bank_running_time()
            self.state = SessionState.PAUSED
            change = self.repository.end(self.workout, int(self._accumulated))
            self.state = SessionState.ENDED
        return change
