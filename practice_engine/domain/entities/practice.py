"""Catalog entities: practice configurations, clips and targets."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import DEFAULT_ACTIVITY_TYPE


class PracticeMode(str, Enum):
    """How progress through a practice is measured."""

    DURATION = "duration"
    COUNT = "count"


class TargetSpec(BaseModel):
    """A practice target: minutes for duration mode, repetitions for count mode."""

    model_config = ConfigDict(frozen=True)

    mode: PracticeMode
    value: int = Field(ge=1, description="Minutes (duration mode) or repetitions (count mode)")

    @classmethod
    def minutes(cls, minutes: int) -> "TargetSpec":
        return cls(mode=PracticeMode.DURATION, value=minutes)

    @classmethod
    def count(cls, count: int) -> "TargetSpec":
        return cls(mode=PracticeMode.COUNT, value=count)

    @property
    def is_duration(self) -> bool:
        return self.mode == PracticeMode.DURATION

    def distance_to(self, other: "TargetSpec") -> Optional[int]:
        """Absolute difference to another target of the same mode, None across modes."""
        if other.mode != self.mode:
            return None
        return abs(other.value - self.value)

    def __str__(self) -> str:
        unit = "min" if self.is_duration else "x"
        return f"{self.value}{unit}"


class PracticeConfiguration(BaseModel):
    """One offered variant of a practice, binding an emotion and a target to a reward.

    Created and edited by the content management side of the platform; the
    session engine only ever reads it.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    activity_type: str = DEFAULT_ACTIVITY_TYPE
    title: str = ""
    emotion_tag: str
    target: TargetSpec
    reward_points: int = Field(default=0, ge=0, description="Reward for 100% completion")

    @field_validator("emotion_tag", "activity_type")
    @classmethod
    def normalize_tags(cls, value: str) -> str:
        return value.strip().lower()


class PracticeClip(BaseModel):
    """A media asset attached to a configuration.

    A clip with neither a video nor an audio URL is a silent practice and is
    still playable.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    configuration_id: str
    title: str = ""
    description: Optional[str] = None
    video_url: Optional[str] = None
    audio_url: Optional[str] = None
    video_key: Optional[str] = Field(None, description="Storage key of the video asset")
    audio_key: Optional[str] = Field(None, description="Storage key of the audio asset")

    @property
    def has_media(self) -> bool:
        return bool(self.video_url or self.audio_url)
