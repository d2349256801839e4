"""Practice session service tying the clock, media, reward and recorder together."""

import asyncio
import logging
from typing import Optional

from ..constants import DEFAULT_ACTIVITY_TYPE
from ..entities.media import MediaTrack, TrackState
from ..entities.practice import PracticeClip, TargetSpec
from ..entities.session import (
    ContentSelection,
    MediaRefs,
    RewardStatus,
    SessionPhase,
    SessionResult,
    SessionState,
)
from ..entities.submission import RecordOutcome, RecordStatus
from ..interfaces.identity_provider import IdentityProvider
from .media_synchronizer import MediaSynchronizer
from .reward_calculator import RewardCalculator
from .session_clock import SessionClock
from .session_recorder import SessionRecorder

logger = logging.getLogger(__name__)

_REWARD_STATUS_BY_RECORD_STATUS = {
    RecordStatus.ACCEPTED: RewardStatus.CONFIRMED,
    RecordStatus.UNAUTHENTICATED: RewardStatus.UNAUTHENTICATED,
    RecordStatus.FAILED: RewardStatus.UNCONFIRMED,
}


class PracticeSessionService:
    """
    Per-session service that owns one SessionState from start to record.

    This service owns:
    - The session clock and its one-second ticker
    - The media synchronizer attached to the selected clip
    - Finalization: media stop, reward computation, the single SessionResult
    - Fire-and-forget submission of the result and the reward status it yields

    Ticks, increments and stops are serialized through one lock, so a tick
    and a stop arriving together cannot both finalize the session.
    """

    def __init__(
        self,
        state: SessionState,
        synchronizer: MediaSynchronizer,
        recorder: SessionRecorder,
        identity_provider: IdentityProvider,
        clip: Optional[PracticeClip] = None,
        reward_calculator: Optional[RewardCalculator] = None,
        tick_interval: Optional[float] = 1.0,
    ):
        self.state = state
        self.clip = clip
        self.clock = SessionClock(state)
        self.synchronizer = synchronizer
        self.recorder = recorder
        self.identity_provider = identity_provider
        self.reward_calculator = reward_calculator or RewardCalculator()
        self.tick_interval = tick_interval
        self.outcome: Optional[RecordOutcome] = None

        self._lock = asyncio.Lock()
        self._ticker: Optional[asyncio.Task] = None
        self._media_start: Optional[asyncio.Task] = None
        self._record_task: Optional[asyncio.Task] = None

        logger.info(f"PracticeSessionService created for session {state.id}")

    @classmethod
    def from_selection(
        cls,
        selection: ContentSelection,
        emotion_tag: str,
        target: TargetSpec,
        synchronizer: MediaSynchronizer,
        recorder: SessionRecorder,
        identity_provider: IdentityProvider,
        activity_type: str = DEFAULT_ACTIVITY_TYPE,
        reward_calculator: Optional[RewardCalculator] = None,
        tick_interval: Optional[float] = 1.0,
    ) -> "PracticeSessionService":
        """Build a service for a fresh session from a content selection."""
        configuration = selection.configuration
        clip = selection.clip
        title = (
            (configuration.title if configuration else "")
            or (clip.title if clip else "")
            or f"{activity_type.capitalize()} Session"
        )
        state = SessionState(
            activity_type=activity_type,
            title=title,
            emotion_tag=emotion_tag.strip().lower(),
            target=target,
            selected_configuration_id=configuration.id if configuration else None,
            selected_clip_id=clip.id if clip else None,
            full_reward=selection.full_reward,
        )
        return cls(
            state=state,
            synchronizer=synchronizer,
            recorder=recorder,
            identity_provider=identity_provider,
            clip=clip,
            reward_calculator=reward_calculator,
            tick_interval=tick_interval,
        )

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def result(self) -> Optional[SessionResult]:
        return self.state.result

    async def start(self) -> None:
        """Start the clock, the background media and the ticker."""
        async with self._lock:
            self.clock.start()
            self.synchronizer.attach(self.clip)
            self._media_start = asyncio.create_task(self.synchronizer.on_session_start())
            if self.tick_interval is not None and self.state.target.is_duration:
                self._ticker = asyncio.create_task(self._run_ticker())
        logger.info(f"Session {self.state.id} started")

    async def tick(self) -> Optional[SessionResult]:
        """Advance a duration session by one second.

        Returns:
            The SessionResult if this tick completed the session, else None.
        """
        async with self._lock:
            if self.state.phase != SessionPhase.RUNNING:
                return None
            if self.clock.tick():
                return await self._finalize()
            return None

    async def increment(self, step: int = 1) -> Optional[SessionResult]:
        """Count repetitions in a count session.

        Returns:
            The SessionResult if this increment completed the session, else None.
        """
        async with self._lock:
            if self.state.phase == SessionPhase.ENDED:
                return None
            if self.clock.increment(step):
                return await self._finalize()
            return None

    async def stop(self) -> SessionResult:
        """End the session early. Repeated calls return the same result."""
        async with self._lock:
            if self.state.result is not None:
                return self.state.result
            self.clock.stop()
            return await self._finalize()

    async def toggle_video(self) -> TrackState:
        return await self.synchronizer.toggle_video()

    async def toggle_audio(self) -> TrackState:
        return await self.synchronizer.toggle_audio()

    async def wait_recorded(self) -> Optional[RecordOutcome]:
        """Wait for the result submission started at finalization, if any."""
        if self._record_task is None:
            return None
        return await self._record_task

    async def close(self) -> None:
        """Release background tasks when the caller abandons the session view.

        A pending result submission is left to finish on its own.
        """
        if self.state.phase == SessionPhase.RUNNING:
            await self.stop()
        for task in (self._ticker, self._media_start):
            if task and not task.done():
                task.cancel()

    async def _finalize(self) -> SessionResult:
        """Stop media, compute the reward and hand the result to the recorder.

        Must be called with the lock held, right after the clock ended.
        """
        if self._ticker is not None and self._ticker is not asyncio.current_task():
            self._ticker.cancel()
        if self._media_start is not None and not self._media_start.done():
            self._media_start.cancel()

        await self.synchronizer.on_session_end()

        ratio, points = self.reward_calculator.compute(self.state, self.state.full_reward)
        result = SessionResult(
            session_id=self.state.id,
            activity_type=self.state.activity_type,
            title=self.state.title,
            emotion_tag=self.state.emotion_tag,
            mode=self.state.mode,
            target_value=self.state.target.value,
            actual_value=self.reward_calculator.actual_progress(self.state),
            completion_ratio=ratio,
            reward_points=points,
            full_reward=self.state.full_reward,
            natural_completion=self.state.natural_completion,
            elapsed_seconds=self.state.elapsed_seconds,
            media_refs=MediaRefs.from_clip(self.clip),
            ended_at=self.state.ended_at,
        )
        self.state.result = result
        self.state.reward_status = RewardStatus.PENDING

        identity = self.identity_provider.get_token()
        self._record_task = asyncio.create_task(self._record(result, identity))

        logger.info(
            f"Session {self.state.id} ended: {result.completion_percentage}% complete, "
            f"{result.reward_points} points"
        )
        return result

    async def _record(self, result: SessionResult, identity: Optional[str]) -> RecordOutcome:
        outcome = await self.recorder.record(result, identity)
        self.outcome = outcome
        self.state.reward_status = _REWARD_STATUS_BY_RECORD_STATUS[outcome.status]
        self.state.status_message = outcome.status_message
        return outcome

    async def _run_ticker(self) -> None:
        """Feed the clock one tick per interval until the session ends."""
        logger.debug(f"Ticker started for session {self.state.id}")
        try:
            while self.state.phase == SessionPhase.RUNNING:
                await asyncio.sleep(self.tick_interval)
                try:
                    await self.tick()
                except Exception as e:
                    logger.error(f"Error processing tick: {e}", exc_info=True)
        except asyncio.CancelledError:
            pass
        finally:
            logger.debug(f"Ticker ended for session {self.state.id}")

    def get_session_state(self) -> dict:
        """Get the current session state as a dictionary."""
        result = self.state.result
        return {
            "session_id": str(self.state.id),
            "activity_type": self.state.activity_type,
            "title": self.state.title,
            "emotion": self.state.emotion_tag,
            "mode": self.state.mode.value,
            "target": self.state.target.value,
            "phase": self.state.phase.value,
            "remaining_seconds": self.state.remaining_seconds,
            "progress_count": self.state.progress_count,
            "configuration_id": self.state.selected_configuration_id,
            "clip_id": self.state.selected_clip_id,
            "video": self.synchronizer.track_state(MediaTrack.VIDEO).value,
            "audio": self.synchronizer.track_state(MediaTrack.AUDIO).value,
            "reward_points": result.reward_points if result else None,
            "completion_percentage": result.completion_percentage if result else None,
            "reward_status": self.state.reward_status.value,
            "status_message": self.state.status_message,
        }
