"""Local in-memory implementation of SessionPersistenceService."""

import uuid
from datetime import datetime
from typing import Any, Dict, List

from ..domain.entities.submission import SubmissionData, SubmissionResponse
from ..domain.interfaces.session_persistence import SessionPersistenceService


def status_message_for(status: str, completion_percentage: int) -> str:
    """Human readable status message, as the platform server words it."""
    if status == "completed":
        return "Session completed successfully!"
    if status == "incomplete":
        return f"Session partially completed ({completion_percentage}%)"
    return "Session saved"


class InMemorySessionPersistence(SessionPersistenceService):
    """Local in-memory implementation of the SessionPersistenceService protocol.

    Stores submitted payloads in a list for testing and development purposes
    and answers like the platform server does.
    """

    def __init__(self):
        self._records: List[Dict[str, Any]] = []

    async def submit_session_result(
        self,
        payload: Dict[str, Any],
        auth_token: str,
    ) -> SubmissionResponse:
        """Store a session result.

        Args:
            payload: Session result fields in the platform's wire format.
            auth_token: Bearer token identifying the caller.

        Returns:
            SubmissionResponse: Success envelope with the status message.
        """
        if not payload.get("type") or not payload.get("title"):
            return SubmissionResponse(
                success=False,
                message="Missing required fields: type, title",
            )

        status = payload.get("status", "completed")
        completion = int(payload.get("completionPercentage", 100))
        record = {
            **payload,
            "_id": str(uuid.uuid4()),
            "userToken": auth_token,
            "completedAt": datetime.utcnow().isoformat(),
        }
        self._records.append(record)

        return SubmissionResponse(
            success=True,
            message=f"Session saved successfully ({status})",
            data=SubmissionData(status_message=status_message_for(status, completion)),
        )

    @property
    def records(self) -> List[Dict[str, Any]]:
        return list(self._records)

    def clear(self) -> None:
        """Clear all stored records."""
        self._records.clear()
