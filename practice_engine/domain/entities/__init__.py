"""Domain entities for the practice session engine."""

from .media import MediaTrack, TrackState
from .practice import PracticeClip, PracticeConfiguration, PracticeMode, TargetSpec
from .session import (
    CompletionStatus,
    ContentSelection,
    MediaRefs,
    RewardStatus,
    SessionPhase,
    SessionResult,
    SessionState,
)
from .submission import (
    RecordOutcome,
    RecordStatus,
    SubmissionData,
    SubmissionResponse,
)

__all__ = [
    # Catalog entities
    "PracticeConfiguration",
    "PracticeClip",
    "PracticeMode",
    "TargetSpec",
    # Session entities
    "SessionState",
    "SessionPhase",
    "SessionResult",
    "CompletionStatus",
    "RewardStatus",
    "MediaRefs",
    "ContentSelection",
    # Media entities
    "MediaTrack",
    "TrackState",
    # Submission entities
    "SubmissionResponse",
    "SubmissionData",
    "RecordOutcome",
    "RecordStatus",
]
