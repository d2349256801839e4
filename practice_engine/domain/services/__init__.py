"""Domain services for the practice session engine."""

from .content_matcher import ContentMatcher, DebouncedContentMatcher
from .media_synchronizer import MediaSynchronizer
from .practice_session_service import PracticeSessionService
from .reward_calculator import RewardCalculator
from .session_clock import SessionClock
from .session_recorder import SessionRecorder

__all__ = [
    "ContentMatcher",
    "DebouncedContentMatcher",
    "MediaSynchronizer",
    "PracticeSessionService",
    "RewardCalculator",
    "SessionClock",
    "SessionRecorder",
]
