"""Content matching: picks the practice configuration and clip for a session."""

import asyncio
import logging
from typing import Optional

from ..constants import DEFAULT_ACTIVITY_TYPE, SELECTION_DEBOUNCE_SECONDS
from ..entities.practice import PracticeClip, PracticeConfiguration, PracticeMode, TargetSpec
from ..entities.session import ContentSelection
from ..exceptions import CatalogUnavailableError
from ..interfaces.catalog_service import CatalogService
from .reward_calculator import RewardCalculator

logger = logging.getLogger(__name__)


class ContentMatcher:
    """
    Selects the best matching configuration and clip for an emotion and target.

    Matching never mutates the catalog and never invents configurations. When
    nothing matches, or the catalog is unreachable, the selection carries the
    fallback reward so the session can still be completed and rewarded.
    """

    def __init__(self, reward_calculator: Optional[RewardCalculator] = None):
        self.reward_calculator = reward_calculator or RewardCalculator()

    def match_configurations(
        self,
        configurations: list[PracticeConfiguration],
        emotion_tag: str,
        target: TargetSpec,
    ) -> list[PracticeConfiguration]:
        """Return the configurations matching the request, in catalog order.

        Duration targets prefer exact matches and otherwise take the
        configurations with the smallest absolute difference. Count targets
        only match exactly.
        """
        emotion = emotion_tag.strip().lower()
        candidates = [
            c for c in configurations
            if c.emotion_tag == emotion and c.target.mode == target.mode
        ]
        if not candidates:
            return []

        if target.mode == PracticeMode.COUNT:
            return [c for c in candidates if c.target.value == target.value]

        best = min(c.target.distance_to(target) for c in candidates)
        return [c for c in candidates if c.target.distance_to(target) == best]

    async def select_content(
        self,
        emotion_tag: str,
        target: TargetSpec,
        catalog: CatalogService,
        activity_type: str = DEFAULT_ACTIVITY_TYPE,
    ) -> ContentSelection:
        """Select content for a session.

        Args:
            emotion_tag: The user's declared emotion.
            target: Requested duration or count.
            catalog: Catalog to select from.
            activity_type: Activity being practiced.

        Returns:
            ContentSelection: Matched configuration and clip, or the fallback.
        """
        try:
            configurations = await catalog.list_configurations(activity_type, emotion_tag)
        except CatalogUnavailableError as e:
            logger.warning(f"Catalog unavailable, using fallback reward: {e}")
            return self._fallback(target, catalog_available=False)

        matched = self.match_configurations(configurations, emotion_tag, target)
        if not matched:
            logger.info(
                f"No {activity_type} configuration for emotion={emotion_tag} target={target}, "
                f"using fallback reward"
            )
            return self._fallback(target, catalog_available=True)

        clips_per_config = await self._fetch_clips(matched, catalog)
        for configuration, clips in zip(matched, clips_per_config):
            if clips:
                clip = clips[0]
                logger.info(f"Selected configuration {configuration.id} with clip {clip.id}")
                return ContentSelection(
                    configuration=configuration,
                    clip=clip,
                    full_reward=configuration.reward_points,
                )

        configuration = matched[0]
        logger.info(f"Selected configuration {configuration.id} without clip")
        return ContentSelection(
            configuration=configuration,
            clip=None,
            full_reward=configuration.reward_points,
        )

    async def _fetch_clips(
        self,
        configurations: list[PracticeConfiguration],
        catalog: CatalogService,
    ) -> list[list[PracticeClip]]:
        results = await asyncio.gather(
            *(catalog.list_clips(c.id) for c in configurations),
            return_exceptions=True,
        )
        clips_per_config = []
        for configuration, result in zip(configurations, results):
            if isinstance(result, Exception):
                logger.warning(f"Clip lookup failed for configuration {configuration.id}: {result}")
                clips_per_config.append([])
            else:
                clips_per_config.append(list(result))
        return clips_per_config

    def _fallback(self, target: TargetSpec, catalog_available: bool) -> ContentSelection:
        return ContentSelection(
            configuration=None,
            clip=None,
            full_reward=self.reward_calculator.fallback_reward(target),
            catalog_available=catalog_available,
        )


class DebouncedContentMatcher:
    """
    Debounces content selection while the user is still changing their choice.

    Each request waits ``delay`` seconds; a request overtaken by a newer one
    during that window, or while its lookup is in flight, returns None.
    """

    def __init__(
        self,
        matcher: ContentMatcher,
        catalog: CatalogService,
        delay: float = SELECTION_DEBOUNCE_SECONDS,
    ):
        self.matcher = matcher
        self.catalog = catalog
        self.delay = delay
        self.latest: Optional[ContentSelection] = None
        self._generation = 0

    async def request(
        self,
        emotion_tag: str,
        target: TargetSpec,
        activity_type: str = DEFAULT_ACTIVITY_TYPE,
    ) -> Optional[ContentSelection]:
        self._generation += 1
        generation = self._generation

        if self.delay > 0:
            await asyncio.sleep(self.delay)
        if generation != self._generation:
            return None

        selection = await self.matcher.select_content(
            emotion_tag, target, self.catalog, activity_type
        )
        if generation != self._generation:
            return None

        self.latest = selection
        return selection
