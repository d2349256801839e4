"""Session recorder: persists each finished session exactly once."""

import asyncio
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from ..entities.practice import PracticeMode
from ..entities.session import SessionResult
from ..entities.submission import RecordOutcome, RecordStatus
from ..exceptions import SubmissionError
from ..interfaces.session_persistence import SessionPersistenceService

logger = logging.getLogger(__name__)

UNAUTHENTICATED_MESSAGE = "Please log in to save your sessions and earn karma points!"
SUBMISSION_FAILED_MESSAGE = (
    "Failed to save session. Please check your internet connection and try again."
)


class SessionRecorder:
    """
    Submits session results to the persistence service.

    Concurrent calls for the same session id share one in-flight attempt;
    finished attempts are forgotten, since each session service records its
    result only once. Missing identity and submission failures are reported
    in the outcome, never raised, and are not retried.
    """

    def __init__(self, persistence: SessionPersistenceService):
        self.persistence = persistence
        self._attempts: Dict[UUID, "asyncio.Task[RecordOutcome]"] = {}

    def build_payload(self, result: SessionResult) -> Dict[str, Any]:
        """Build the persistence payload for a result."""
        payload: Dict[str, Any] = {
            "type": result.activity_type,
            "title": result.title,
            "emotion": result.emotion_tag,
            "karmaPoints": result.reward_points,
            "status": result.completion_status.value,
            "completionPercentage": result.completion_percentage,
        }
        if result.mode == PracticeMode.DURATION:
            payload["targetDuration"] = result.target_value
            payload["actualDuration"] = result.actual_value
        else:
            payload["targetCount"] = result.target_value
            payload["chantCount"] = result.actual_value
            payload["chantingName"] = result.title
            payload["elapsedSeconds"] = result.elapsed_seconds
        if result.media_refs.video:
            payload["videoKey"] = result.media_refs.video
        if result.media_refs.audio:
            payload["audioKey"] = result.media_refs.audio
        return payload

    def is_recording(self, session_id: UUID) -> bool:
        return session_id in self._attempts

    @property
    def in_flight(self) -> int:
        return len(self._attempts)

    async def record(self, result: SessionResult, identity: Optional[str]) -> RecordOutcome:
        """Record a finished session.

        Args:
            result: The session's result.
            identity: The caller's bearer token, None when signed out.

        Returns:
            RecordOutcome: Whether the result was accepted, plus the message
            to show the user.
        """
        attempt = self._attempts.get(result.session_id)
        if attempt is None:
            attempt = asyncio.ensure_future(self._submit(result, identity))
            self._attempts[result.session_id] = attempt
            attempt.add_done_callback(
                lambda _: self._attempts.pop(result.session_id, None)
            )
        else:
            logger.warning(f"Session {result.session_id} is already being recorded, joining it")
        return await asyncio.shield(attempt)

    async def _submit(self, result: SessionResult, identity: Optional[str]) -> RecordOutcome:
        if not identity:
            logger.warning(f"No identity for session {result.session_id}, result not saved")
            return RecordOutcome(
                accepted=False,
                status=RecordStatus.UNAUTHENTICATED,
                status_message=UNAUTHENTICATED_MESSAGE,
            )

        payload = self.build_payload(result)
        try:
            response = await self.persistence.submit_session_result(payload, identity)
        except SubmissionError as e:
            logger.error(f"Error saving session {result.session_id}: {e}", exc_info=True)
            return RecordOutcome(
                accepted=False,
                status=RecordStatus.FAILED,
                status_message=SUBMISSION_FAILED_MESSAGE,
            )

        if not response.success:
            logger.error(f"Session {result.session_id} rejected by server: {response.message}")
            return RecordOutcome(
                accepted=False,
                status=RecordStatus.FAILED,
                status_message=response.message or SUBMISSION_FAILED_MESSAGE,
            )

        status_message = response.data.status_message if response.data else None
        logger.info(
            f"Session {result.session_id} saved successfully: {status_message or response.message}"
        )
        return RecordOutcome(
            accepted=True,
            status=RecordStatus.ACCEPTED,
            status_message=status_message,
        )
