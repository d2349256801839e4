"""Background media synchronization for practice sessions."""

import asyncio
import logging
from typing import Dict, Optional

from ..constants import MEDIA_SETTLE_DELAY_SECONDS
from ..entities.media import MediaTrack, TrackState
from ..entities.practice import PracticeClip
from ..interfaces.media_surface import MediaPlaybackSurface

logger = logging.getLogger(__name__)


class MediaSynchronizer:
    """
    Keeps the optional background video and audio in step with a session.

    Each track loops and is controlled independently. Playback rejections
    (e.g. autoplay policies) leave the track in the BLOCKED state instead of
    failing the session. Without a clip, or with a clip that has no media,
    every method is a no-op.
    """

    def __init__(
        self,
        video_surface: Optional[MediaPlaybackSurface] = None,
        audio_surface: Optional[MediaPlaybackSurface] = None,
        settle_delay: float = MEDIA_SETTLE_DELAY_SECONDS,
    ):
        self._surfaces: Dict[MediaTrack, Optional[MediaPlaybackSurface]] = {
            MediaTrack.VIDEO: video_surface,
            MediaTrack.AUDIO: audio_surface,
        }
        self._states: Dict[MediaTrack, TrackState] = {
            MediaTrack.VIDEO: TrackState.DETACHED,
            MediaTrack.AUDIO: TrackState.DETACHED,
        }
        self.settle_delay = settle_delay
        self.clip: Optional[PracticeClip] = None
        self._session_live = False
        self._ended = False

    def attach(self, clip: Optional[PracticeClip]) -> None:
        """Bind the clip's media URLs to the playback surfaces."""
        self.clip = clip
        self._ended = False
        urls = {
            MediaTrack.VIDEO: clip.video_url if clip else None,
            MediaTrack.AUDIO: clip.audio_url if clip else None,
        }
        for track, url in urls.items():
            surface = self._surfaces[track]
            if url and surface is not None:
                surface.load(url, loop=True)
                self._states[track] = TrackState.STOPPED
                logger.debug(f"Attached {track.value} track: {url}")
            else:
                self._states[track] = TrackState.DETACHED

    def track_state(self, track: MediaTrack) -> TrackState:
        return self._states[track]

    @property
    def video_playing(self) -> bool:
        return self._states[MediaTrack.VIDEO] == TrackState.PLAYING

    @property
    def audio_playing(self) -> bool:
        return self._states[MediaTrack.AUDIO] == TrackState.PLAYING

    def _attached_tracks(self) -> list[MediaTrack]:
        return [t for t, s in self._states.items() if s != TrackState.DETACHED]

    async def on_session_start(self) -> None:
        """Start every attached track after the settle delay."""
        self._session_live = True
        tracks = self._attached_tracks()
        if not tracks:
            return

        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)
        # The session may have ended while we were settling
        if not self._session_live:
            return

        for track in tracks:
            await self._play(track)

    async def on_session_end(self) -> None:
        """Pause and rewind every attached track, whatever its current state.

        A track whose pause was rejected keeps reporting PLAYING; it can still
        be paused through its toggle, but no track can be started again.
        """
        self._session_live = False
        self._ended = True
        for track in self._attached_tracks():
            surface = self._surfaces[track]
            try:
                if not await surface.pause():
                    logger.warning(f"Pause of {track.value} track was rejected")
            except Exception as e:
                logger.warning(f"Pause of {track.value} track failed: {e}")
            surface.reset_position()
            self._states[track] = TrackState.STOPPED if surface.paused else TrackState.PLAYING

    async def toggle_video(self) -> TrackState:
        return await self._toggle(MediaTrack.VIDEO)

    async def toggle_audio(self) -> TrackState:
        return await self._toggle(MediaTrack.AUDIO)

    async def _toggle(self, track: MediaTrack) -> TrackState:
        state = self._states[track]
        if state == TrackState.DETACHED:
            return state
        if self._ended and state != TrackState.PLAYING:
            logger.info(f"Session ended, not starting {track.value} track")
            return state
        if state == TrackState.PLAYING:
            surface = self._surfaces[track]
            try:
                paused = await surface.pause()
            except Exception as e:
                logger.warning(f"Pause of {track.value} track failed: {e}")
                paused = False
            if paused:
                self._states[track] = TrackState.STOPPED
            return self._states[track]
        return await self._play(track)

    async def _play(self, track: MediaTrack) -> TrackState:
        surface = self._surfaces[track]
        try:
            started = await surface.play()
        except Exception as e:
            logger.warning(f"Playback of {track.value} track failed: {e}")
            started = False

        if started:
            self._states[track] = TrackState.PLAYING
            logger.info(f"{track.value.capitalize()} track playing")
        else:
            self._states[track] = TrackState.BLOCKED
            logger.warning(f"{track.value.capitalize()} playback prevented, continuing without it")
        return self._states[track]
