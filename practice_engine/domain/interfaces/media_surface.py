"""Media playback surface interface."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class MediaPlaybackSurface(Protocol):
    """Protocol for a single media element (one video or one audio track).

    ``play`` and ``pause`` report a rejection by returning False instead of
    raising, so callers can degrade to a silent practice.
    """

    @property
    def paused(self) -> bool:
        ...

    @property
    def position(self) -> float:
        ...

    def load(self, url: str, loop: bool = True) -> None:
        """Bind the surface to a media URL."""
        ...

    async def play(self) -> bool:
        """Request playback. Returns False if the runtime rejected it."""
        ...

    async def pause(self) -> bool:
        """Request a pause. Returns False if the runtime rejected it."""
        ...

    def reset_position(self) -> None:
        """Rewind to position zero."""
        ...
