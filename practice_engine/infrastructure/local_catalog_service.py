"""Local in-memory implementation of CatalogService."""

from typing import Dict, Optional

from ..domain.entities.practice import PracticeClip, PracticeConfiguration
from ..domain.interfaces.catalog_service import CatalogService


class InMemoryCatalogService(CatalogService):
    """Local in-memory implementation of the CatalogService protocol.

    Keeps configurations and clips in insertion order for testing and
    development purposes.
    """

    def __init__(
        self,
        configurations: Optional[list[PracticeConfiguration]] = None,
        clips: Optional[list[PracticeClip]] = None,
    ):
        self._configurations: list[PracticeConfiguration] = list(configurations or [])
        self._clips: Dict[str, list[PracticeClip]] = {}
        for clip in clips or []:
            self.add_clip(clip)

    async def list_configurations(
        self,
        activity_type: str,
        emotion_tag: Optional[str] = None,
    ) -> list[PracticeConfiguration]:
        """List configurations for an activity, optionally narrowed by emotion.

        Args:
            activity_type: Activity to list configurations for.
            emotion_tag: Optional emotion filter.

        Returns:
            list[PracticeConfiguration]: Configurations in insertion order.
        """
        activity = activity_type.strip().lower()
        emotion = emotion_tag.strip().lower() if emotion_tag else None
        return [
            c for c in self._configurations
            if c.activity_type == activity and (emotion is None or c.emotion_tag == emotion)
        ]

    async def list_clips(self, configuration_id: str) -> list[PracticeClip]:
        """List the clips attached to a configuration.

        Args:
            configuration_id: Identifier of the configuration.

        Returns:
            list[PracticeClip]: Clips in insertion order.
        """
        return list(self._clips.get(configuration_id, []))

    def add_configuration(self, configuration: PracticeConfiguration) -> None:
        """Append a configuration to the catalog."""
        self._configurations.append(configuration)

    def add_clip(self, clip: PracticeClip) -> None:
        """Attach a clip to its configuration."""
        self._clips.setdefault(clip.configuration_id, []).append(clip)

    def clear(self) -> None:
        """Remove every configuration and clip."""
        self._configurations.clear()
        self._clips.clear()
