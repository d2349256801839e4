"""Session clock driving countdown and tally practices."""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..constants import SECONDS_PER_MINUTE, TICK_SECONDS
from ..entities.practice import PracticeMode
from ..entities.session import SessionPhase, SessionState
from ..exceptions import InvalidPhaseTransitionError

logger = logging.getLogger(__name__)

ClockListener = Callable[[SessionState], None]


class SessionClock:
    """
    Owns the phase and progress fields of one SessionState.

    Duration sessions count down one second per tick and end by themselves at
    zero. Count sessions only advance on explicit increments and end by
    themselves once the target is reached. The clock has no timer of its own;
    the owning service feeds it ticks.
    """

    def __init__(self, state: SessionState):
        self.state = state
        self._listeners: list[ClockListener] = []

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def progress(self) -> int:
        """Remaining seconds for duration sessions, counted repetitions for count sessions."""
        if self.state.mode == PracticeMode.DURATION:
            return self.state.remaining_seconds or 0
        return self.state.progress_count or 0

    def add_listener(self, listener: ClockListener) -> None:
        """Register a callback invoked with the state after every change."""
        self._listeners.append(listener)

    def start(self) -> None:
        """Move the session from idle to running and initialize its progress."""
        if self.state.phase != SessionPhase.IDLE:
            raise InvalidPhaseTransitionError(
                f"Session {self.state.id} cannot start from phase {self.state.phase.value}"
            )

        if self.state.mode == PracticeMode.DURATION:
            self.state.remaining_seconds = self.state.target.value * SECONDS_PER_MINUTE
        elif self.state.mode == PracticeMode.COUNT:
            self.state.progress_count = 0
        else:
            raise ValueError(f"Unsupported practice mode: {self.state.mode}")

        self.state.phase = SessionPhase.RUNNING
        self.state.started_at = datetime.utcnow()
        logger.info(f"Clock started for session {self.state.id} ({self.state.target})")
        self._notify()

    def tick(self) -> bool:
        """Advance a duration countdown by one second.

        Returns:
            True if this tick completed the session.
        """
        if self.state.mode != PracticeMode.DURATION:
            return False
        if self.state.phase == SessionPhase.ENDED:
            return False
        if self.state.phase == SessionPhase.IDLE:
            raise InvalidPhaseTransitionError(f"Session {self.state.id} has not started")

        remaining = max(0, (self.state.remaining_seconds or 0) - TICK_SECONDS)
        self.state.remaining_seconds = remaining
        if remaining == 0:
            self._end(natural=True)
            return True
        self._notify()
        return False

    def increment(self, step: int = 1) -> bool:
        """Add repetitions to a count session.

        Returns:
            True if this increment completed the session.
        """
        if self.state.mode != PracticeMode.COUNT:
            raise InvalidPhaseTransitionError(
                f"Session {self.state.id} is a duration session and cannot be incremented"
            )
        if step < 1:
            raise ValueError(f"Increment step must be at least 1, got {step}")
        if self.state.phase == SessionPhase.ENDED:
            return False
        if self.state.phase == SessionPhase.IDLE:
            raise InvalidPhaseTransitionError(f"Session {self.state.id} has not started")

        count = (self.state.progress_count or 0) + step
        self.state.progress_count = count
        if count >= self.state.target.value:
            self._end(natural=True)
            return True
        self._notify()
        return False

    def stop(self) -> int:
        """End the session early. Calling it on an ended session is a no-op.

        Returns:
            The final progress (see ``progress``).
        """
        if self.state.phase == SessionPhase.IDLE:
            raise InvalidPhaseTransitionError(f"Session {self.state.id} has not started")
        if self.state.phase == SessionPhase.RUNNING:
            self._end(natural=False)
        return self.progress

    def _end(self, natural: bool) -> None:
        self.state.phase = SessionPhase.ENDED
        self.state.natural_completion = natural
        self.state.ended_at = datetime.utcnow()
        logger.info(
            f"Clock ended for session {self.state.id} "
            f"({'natural completion' if natural else 'stopped early'}, progress={self.progress})"
        )
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            try:
                listener(self.state)
            except Exception as e:
                logger.error(f"Clock listener failed: {e}", exc_info=True)
