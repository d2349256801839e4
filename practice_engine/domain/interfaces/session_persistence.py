"""Session persistence service interface."""

from typing import Any, Dict, Protocol, runtime_checkable

from ..entities.submission import SubmissionResponse


@runtime_checkable
class SessionPersistenceService(Protocol):
    """Protocol for the service that stores finished session results."""

    async def submit_session_result(
        self,
        payload: Dict[str, Any],
        auth_token: str,
    ) -> SubmissionResponse:
        """Submit one session result.

        Args:
            payload: Session result fields in the platform's wire format.
            auth_token: Bearer token identifying the caller.

        Returns:
            SubmissionResponse: The service's response envelope.

        Raises:
            SubmissionError: If the request could not be delivered.
        """
        ...
