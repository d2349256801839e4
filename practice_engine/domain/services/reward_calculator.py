"""Reward calculation for finished practice sessions."""

import logging
import math
from typing import Tuple

from ..constants import (
    FALLBACK_COUNT_DIVISOR,
    FALLBACK_MAX_COUNT_REWARD,
    FALLBACK_MAX_DURATION_REWARD,
    FALLBACK_MAX_MINUTES,
    FALLBACK_MIN_DURATION_REWARD,
    FALLBACK_MIN_MINUTES,
    SECONDS_PER_MINUTE,
)
from ..entities.practice import PracticeMode, TargetSpec
from ..entities.session import SessionState

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


class RewardCalculator:
    """Converts the final progress of a session into a completion ratio and reward.

    The calculator is stateless; the same inputs always produce the same
    outputs.
    """

    def fallback_reward(self, target: TargetSpec) -> int:
        """Full reward for a target when no catalog configuration matched.

        Duration targets scale linearly from 3 points at 1 minute to 15 points
        at 10 minutes; longer targets earn the 10 minute reward. Count targets
        earn one point per ten repetitions, capped at 60.
        """
        if target.mode == PracticeMode.DURATION:
            minutes = min(FALLBACK_MAX_MINUTES, max(FALLBACK_MIN_MINUTES, target.value))
            slope = (FALLBACK_MAX_DURATION_REWARD - FALLBACK_MIN_DURATION_REWARD) / (
                FALLBACK_MAX_MINUTES - FALLBACK_MIN_MINUTES
            )
            return round_half_up(FALLBACK_MIN_DURATION_REWARD + (minutes - FALLBACK_MIN_MINUTES) * slope)
        if target.mode == PracticeMode.COUNT:
            return min(FALLBACK_MAX_COUNT_REWARD, target.value // FALLBACK_COUNT_DIVISOR)
        raise ValueError(f"Unsupported practice mode: {target.mode}")

    def actual_progress(self, state: SessionState) -> int:
        """Progress achieved at stop: whole minutes completed, or repetitions counted."""
        if state.mode == PracticeMode.DURATION:
            remaining = state.remaining_seconds
            if remaining is None:
                return 0
            remaining_minutes = math.ceil(max(0, remaining) / SECONDS_PER_MINUTE)
            return max(0, state.target.value - remaining_minutes)
        if state.mode == PracticeMode.COUNT:
            return max(0, state.progress_count or 0)
        raise ValueError(f"Unsupported practice mode: {state.mode}")

    def compute(self, state: SessionState, full_reward: int) -> Tuple[float, int]:
        """Compute the completion ratio and reward points for a final state.

        Args:
            state: Session state at the moment the clock stopped.
            full_reward: Reward for 100% completion.

        Returns:
            Tuple of (completion_ratio clamped to [0, 1], reward_points).
        """
        if full_reward < 0:
            raise ValueError(f"full_reward must be non-negative, got {full_reward}")

        if state.natural_completion:
            ratio = 1.0
        else:
            ratio = self.actual_progress(state) / state.target.value
            ratio = min(1.0, max(0.0, ratio))

        if ratio >= 1.0:
            points = full_reward
        else:
            points = min(full_reward, round_half_up(ratio * full_reward))

        logger.debug(
            f"Reward for session {state.id}: ratio={ratio:.3f}, "
            f"points={points}/{full_reward}"
        )
        return ratio, points
