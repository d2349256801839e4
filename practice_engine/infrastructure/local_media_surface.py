"""In-memory media playback surface."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class InMemoryMediaSurface:
    """Media element stand-in that tracks play state and position.

    Used for headless runs and tests. Set ``reject_play`` to simulate a
    runtime that refuses autoplay.
    """

    def __init__(self, reject_play: bool = False, reject_pause: bool = False):
        self.reject_play = reject_play
        self.reject_pause = reject_pause
        self.url: Optional[str] = None
        self.loop = False
        self._paused = True
        self._position = 0.0
        self.play_calls = 0
        self.pause_calls = 0

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def position(self) -> float:
        return self._position

    def load(self, url: str, loop: bool = True) -> None:
        self.url = url
        self.loop = loop
        self._paused = True
        self._position = 0.0

    async def play(self) -> bool:
        self.play_calls += 1
        if self.reject_play or self.url is None:
            logger.debug(f"Play rejected for {self.url}")
            return False
        self._paused = False
        return True

    async def pause(self) -> bool:
        self.pause_calls += 1
        if self.reject_pause:
            return False
        self._paused = True
        return True

    def reset_position(self) -> None:
        self._position = 0.0

    def advance(self, seconds: float) -> None:
        """Move the playhead forward while playing."""
        if not self._paused:
            self._position += seconds
