"""Session entities for the practice session engine."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..constants import SECONDS_PER_MINUTE
from .practice import PracticeClip, PracticeConfiguration, PracticeMode, TargetSpec


class SessionPhase(str, Enum):
    """Session lifecycle phase. Transitions only run idle -> running -> ended."""

    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


class RewardStatus(str, Enum):
    """Whether the persistence service has confirmed the session's reward."""

    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    UNCONFIRMED = "unconfirmed"
    UNAUTHENTICATED = "unauthenticated"


class CompletionStatus(str, Enum):
    """Completion status as sent to the persistence service."""

    COMPLETED = "completed"
    INCOMPLETE = "incomplete"


class MediaRefs(BaseModel):
    """Identifiers of the media used during a session."""

    model_config = ConfigDict(frozen=True)

    video: Optional[str] = None
    audio: Optional[str] = None

    @classmethod
    def from_clip(cls, clip: Optional[PracticeClip]) -> "MediaRefs":
        if clip is None:
            return cls()
        return cls(
            video=clip.video_key or clip.video_url,
            audio=clip.audio_key or clip.audio_url,
        )


class ContentSelection(BaseModel):
    """Outcome of matching an emotion and target against the catalog."""

    model_config = ConfigDict(frozen=True)

    configuration: Optional[PracticeConfiguration] = None
    clip: Optional[PracticeClip] = None
    full_reward: int = Field(ge=0)
    catalog_available: bool = True

    @property
    def matched(self) -> bool:
        return self.configuration is not None


class SessionResult(BaseModel):
    """Immutable record of a finished session, produced exactly once."""

    model_config = ConfigDict(frozen=True)

    session_id: UUID
    activity_type: str
    title: str
    emotion_tag: str
    mode: PracticeMode
    target_value: int = Field(ge=1)
    actual_value: int = Field(ge=0)
    completion_ratio: float = Field(ge=0.0, le=1.0)
    reward_points: int = Field(ge=0)
    full_reward: int = Field(ge=0)
    natural_completion: bool = False
    elapsed_seconds: int = Field(default=0, ge=0)
    media_refs: MediaRefs = Field(default_factory=MediaRefs)
    ended_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def target_duration(self) -> Optional[int]:
        return self.target_value if self.mode == PracticeMode.DURATION else None

    @property
    def actual_duration(self) -> Optional[int]:
        return self.actual_value if self.mode == PracticeMode.DURATION else None

    @property
    def target_count(self) -> Optional[int]:
        return self.target_value if self.mode == PracticeMode.COUNT else None

    @property
    def actual_count(self) -> Optional[int]:
        return self.actual_value if self.mode == PracticeMode.COUNT else None

    @property
    def completion_status(self) -> CompletionStatus:
        if self.completion_ratio >= 1.0:
            return CompletionStatus.COMPLETED
        return CompletionStatus.INCOMPLETE

    @property
    def completion_percentage(self) -> int:
        # round half up, like the platform clients
        return int(self.completion_ratio * 100 + 0.5)


class SessionState(BaseModel):
    """Mutable state of one practice attempt.

    Selection fields are copied in at creation and cannot be reassigned.
    Progress and phase are mutated only by the session clock; the reward
    fields only by the owning session service.
    """

    id: UUID = Field(default_factory=uuid.uuid4, frozen=True)
    activity_type: str = Field(frozen=True)
    title: str = Field(default="", frozen=True)
    emotion_tag: str = Field(frozen=True)
    target: TargetSpec = Field(frozen=True)
    selected_configuration_id: Optional[str] = Field(default=None, frozen=True)
    selected_clip_id: Optional[str] = Field(default=None, frozen=True)
    full_reward: int = Field(default=0, ge=0, frozen=True)
    phase: SessionPhase = SessionPhase.IDLE
    remaining_seconds: Optional[int] = None
    progress_count: Optional[int] = None
    natural_completion: bool = False
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    result: Optional[SessionResult] = None
    reward_status: RewardStatus = RewardStatus.NOT_SUBMITTED
    status_message: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "activity_type": "meditation",
                "emotion_tag": "calm",
                "target": {"mode": "duration", "value": 5},
                "phase": "running",
                "remaining_seconds": 240,
            }
        }
    )

    @property
    def mode(self) -> PracticeMode:
        return self.target.mode

    @property
    def elapsed_seconds(self) -> int:
        """Seconds of practice so far: countdown progress or wall time for count mode."""
        if self.mode == PracticeMode.DURATION and self.remaining_seconds is not None:
            return self.target.value * SECONDS_PER_MINUTE - self.remaining_seconds
        if self.started_at is None:
            return 0
        end = self.ended_at or datetime.utcnow()
        return max(0, int((end - self.started_at).total_seconds()))
