"""Platform REST API implementation of SessionPersistenceService."""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from ..domain.entities.submission import SubmissionResponse
from ..domain.exceptions import SubmissionError
from ..domain.interfaces.session_persistence import SessionPersistenceService

logger = logging.getLogger(__name__)

SAVE_SESSION_PATH = "/spiritual-stats/save-session"


class HttpSessionPersistence(SessionPersistenceService):
    """Submits session results to the platform's spiritual-stats endpoint.

    No retries and no dedup key: the caller guarantees one submission per
    session.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the persistence client.

        Args:
            base_url: Base URL of the platform API (e.g. http://localhost:5000/api).
            timeout: Request timeout in seconds, None for no timeout.
            client: Optional pre-configured client (used in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def submit_session_result(
        self,
        payload: Dict[str, Any],
        auth_token: str,
    ) -> SubmissionResponse:
        """POST a session result.

        Args:
            payload: Session result fields in the platform's wire format.
            auth_token: Bearer token identifying the caller.

        Returns:
            SubmissionResponse: The server's response envelope. Error statuses
            with a JSON body are returned with ``success`` False.

        Raises:
            SubmissionError: On transport failure or an unreadable response.
        """
        headers = {
            "Authorization": f"Bearer {auth_token}",
            "Content-Type": "application/json",
        }
        try:
            resp = await self._get_client().post(SAVE_SESSION_PATH, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise SubmissionError(f"Could not reach session service: {e}") from e

        try:
            body = resp.json()
        except ValueError as e:
            raise SubmissionError(
                f"Session service returned HTTP {resp.status_code} without JSON body"
            ) from e

        if not isinstance(body, dict):
            raise SubmissionError(f"Unexpected session service response: {body!r}")
        if resp.is_error:
            logger.warning(f"Session service returned HTTP {resp.status_code}: {body.get('message')}")
            body = {**body, "success": False}

        try:
            return SubmissionResponse.model_validate(body)
        except ValidationError as e:
            raise SubmissionError(f"Malformed session service response: {e}") from e

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
