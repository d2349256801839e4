"""Entities exchanged with the session persistence service."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmissionData(BaseModel):
    """Payload returned by the persistence service on acceptance."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status_message: Optional[str] = Field(None, alias="statusMessage")


class SubmissionResponse(BaseModel):
    """Response envelope of the persistence service."""

    success: bool
    data: Optional[SubmissionData] = None
    message: Optional[str] = None


class RecordStatus(str, Enum):
    """Outcome categories of a record attempt."""

    ACCEPTED = "accepted"
    UNAUTHENTICATED = "unauthenticated"
    FAILED = "failed"


class RecordOutcome(BaseModel):
    """What the session recorder reports back to the caller.

    ``status_message`` is the server's text on acceptance, or the user-facing
    warning when the record was refused or failed.
    """

    model_config = ConfigDict(frozen=True)

    accepted: bool
    status: RecordStatus
    status_message: Optional[str] = None
