"""Practice session controller for coordinating per-user sessions."""

import logging
from typing import Callable, Dict, Optional

from ..domain.constants import (
    DEFAULT_ALLOWED_COUNTS,
    DEFAULT_EMOTION_TAGS,
    DEFAULT_MAX_DURATION_MINUTES,
    DEFAULT_MIN_DURATION_MINUTES,
    MEDIA_SETTLE_DELAY_SECONDS,
    SELECTION_DEBOUNCE_SECONDS,
)
from ..domain.entities import (
    ContentSelection,
    MediaTrack,
    PracticeMode,
    SessionPhase,
    SessionResult,
    TargetSpec,
    TrackState,
)
from ..domain.exceptions import SessionAlreadyActiveError, SessionNotFoundError
from ..domain.interfaces.catalog_service import CatalogService
from ..domain.interfaces.identity_provider import IdentityProvider
from ..domain.interfaces.media_surface import MediaPlaybackSurface
from ..domain.interfaces.session_persistence import SessionPersistenceService
from ..domain.services import (
    ContentMatcher,
    DebouncedContentMatcher,
    MediaSynchronizer,
    PracticeSessionService,
    SessionRecorder,
)

logger = logging.getLogger(__name__)

MediaSurfaceFactory = Callable[[], MediaPlaybackSurface]


class PracticeSessionController:
    """
    Controller for coordinating practice sessions.

    This controller is injected with the catalog and persistence services and
    keeps at most one session per user. It validates requests against the
    configured vocabulary, keeping the API layer thin.
    """

    def __init__(
        self,
        catalog: CatalogService,
        persistence: SessionPersistenceService,
        media_surface_factory: Optional[MediaSurfaceFactory] = None,
        emotion_tags: tuple = DEFAULT_EMOTION_TAGS,
        min_duration_minutes: int = DEFAULT_MIN_DURATION_MINUTES,
        max_duration_minutes: int = DEFAULT_MAX_DURATION_MINUTES,
        allowed_counts: tuple = DEFAULT_ALLOWED_COUNTS,
        tick_interval: Optional[float] = 1.0,
        media_settle_delay: float = MEDIA_SETTLE_DELAY_SECONDS,
        selection_debounce: float = SELECTION_DEBOUNCE_SECONDS,
    ):
        """
        Initialize the controller with injected dependencies.

        Args:
            catalog: Catalog of practice configurations and clips
            persistence: Service storing finished session results
            media_surface_factory: Builds one playback surface per track; None disables media
            emotion_tags: Accepted emotion vocabulary
            min_duration_minutes: Shortest accepted duration target
            max_duration_minutes: Longest accepted duration target
            allowed_counts: Accepted count targets
            tick_interval: Wall-clock seconds between clock ticks, None for manual ticking
            media_settle_delay: Seconds to wait before starting media
            selection_debounce: Debounce window for selection previews
        """
        self.catalog = catalog
        self.persistence = persistence
        self.media_surface_factory = media_surface_factory
        self.emotion_tags = {tag.strip().lower() for tag in emotion_tags}
        self.min_duration_minutes = min_duration_minutes
        self.max_duration_minutes = max_duration_minutes
        self.allowed_counts = set(allowed_counts)
        self.tick_interval = tick_interval
        self.media_settle_delay = media_settle_delay
        self.selection_debounce = selection_debounce

        self.matcher = ContentMatcher()
        self.recorder = SessionRecorder(persistence)
        self._sessions: Dict[str, PracticeSessionService] = {}
        self._selectors: Dict[str, DebouncedContentMatcher] = {}

        logger.info("PracticeSessionController initialized with providers")

    def validate_request(self, emotion_tag: str, target: TargetSpec) -> None:
        """Check an emotion and target against the configured vocabulary.

        Raises:
            ValueError: If either is outside the vocabulary.
        """
        if emotion_tag.strip().lower() not in self.emotion_tags:
            raise ValueError(f"Unknown emotion: {emotion_tag}")

        if target.mode == PracticeMode.DURATION:
            if not self.min_duration_minutes <= target.value <= self.max_duration_minutes:
                raise ValueError(
                    f"Duration must be between {self.min_duration_minutes} and "
                    f"{self.max_duration_minutes} minutes, got {target.value}"
                )
        elif target.value not in self.allowed_counts:
            allowed = ", ".join(str(c) for c in sorted(self.allowed_counts))
            raise ValueError(f"Count must be one of {allowed}, got {target.value}")

    async def preview_selection(
        self,
        user_key: str,
        activity_type: str,
        emotion_tag: str,
        target: TargetSpec,
    ) -> Optional[ContentSelection]:
        """
        Select content for a user who is still choosing emotion and target.

        Returns:
            The selection, or None if a newer preview for the same user
            superseded this one.
        """
        self.validate_request(emotion_tag, target)
        selector = self._selectors.get(user_key)
        if selector is None:
            selector = DebouncedContentMatcher(
                self.matcher, self.catalog, delay=self.selection_debounce
            )
            self._selectors[user_key] = selector
        return await selector.request(emotion_tag, target, activity_type)

    async def start_session(
        self,
        user_key: str,
        activity_type: str,
        emotion_tag: str,
        target: TargetSpec,
        identity_provider: IdentityProvider,
    ) -> PracticeSessionService:
        """
        Select content and start a new session for a user.

        Raises:
            ValueError: If the request is outside the vocabulary.
            SessionAlreadyActiveError: If the user's previous session is still running.
        """
        self.validate_request(emotion_tag, target)

        existing = self._sessions.get(user_key)
        if existing is not None and existing.phase == SessionPhase.RUNNING:
            raise SessionAlreadyActiveError(
                f"User {user_key} already has session {existing.state.id} running"
            )

        selection = await self.matcher.select_content(
            emotion_tag, target, self.catalog, activity_type
        )
        service = PracticeSessionService.from_selection(
            selection=selection,
            emotion_tag=emotion_tag,
            target=target,
            synchronizer=self._build_synchronizer(),
            recorder=self.recorder,
            identity_provider=identity_provider,
            activity_type=activity_type,
            tick_interval=self.tick_interval,
        )
        await service.start()
        self._sessions[user_key] = service
        logger.info(f"Started session {service.state.id} for user {user_key}")
        return service

    def get_session(self, user_key: str) -> PracticeSessionService:
        """
        Get the user's current or most recent session.

        Raises:
            SessionNotFoundError: If the user has no session.
        """
        service = self._sessions.get(user_key)
        if service is None:
            raise SessionNotFoundError(f"No session for user {user_key}")
        return service

    async def increment(self, user_key: str, step: int = 1) -> PracticeSessionService:
        service = self.get_session(user_key)
        await service.increment(step)
        return service

    async def stop_session(
        self,
        user_key: str,
        identity_provider: Optional[IdentityProvider] = None,
    ) -> SessionResult:
        """
        Stop the user's session, recording it with the identity present now.
        """
        service = self.get_session(user_key)
        if identity_provider is not None and service.result is None:
            service.identity_provider = identity_provider
        return await service.stop()

    async def toggle_media(self, user_key: str, track: MediaTrack) -> TrackState:
        service = self.get_session(user_key)
        if track == MediaTrack.VIDEO:
            return await service.toggle_video()
        return await service.toggle_audio()

    async def shutdown(self) -> None:
        """Close every session, ending the ones still running."""
        for service in list(self._sessions.values()):
            await service.close()

    def _build_synchronizer(self) -> MediaSynchronizer:
        if self.media_surface_factory is None:
            return MediaSynchronizer(settle_delay=self.media_settle_delay)
        return MediaSynchronizer(
            video_surface=self.media_surface_factory(),
            audio_surface=self.media_surface_factory(),
            settle_delay=self.media_settle_delay,
        )

    def get_health_status(self) -> dict:
        """
        Get application health status.

        Returns:
            Dict containing health status information
        """
        running = sum(1 for s in self._sessions.values() if s.phase == SessionPhase.RUNNING)
        return {
            "status": "healthy",
            "providers": {
                "catalog": type(self.catalog).__name__,
                "persistence": type(self.persistence).__name__,
            },
            "running_sessions": running,
        }
