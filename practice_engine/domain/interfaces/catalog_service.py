"""Catalog service interface."""

from typing import Optional, Protocol, runtime_checkable

from ..entities.practice import PracticeClip, PracticeConfiguration


@runtime_checkable
class CatalogService(Protocol):
    """Protocol for practice catalog providers.

    Implementations may be backed by the platform REST API or held in memory.
    Empty results are valid and must not raise.
    """

    async def list_configurations(
        self,
        activity_type: str,
        emotion_tag: Optional[str] = None,
    ) -> list[PracticeConfiguration]:
        """List configurations for an activity, in catalog order.

        Args:
            activity_type: Activity to list configurations for (e.g. "meditation").
            emotion_tag: Optional emotion to narrow the listing.

        Returns:
            list[PracticeConfiguration]: Matching configurations, possibly empty.

        Raises:
            CatalogUnavailableError: If the catalog cannot be reached.
        """
        ...

    async def list_clips(self, configuration_id: str) -> list[PracticeClip]:
        """List the clips attached to a configuration.

        Args:
            configuration_id: Identifier of the configuration.

        Returns:
            list[PracticeClip]: Attached clips in catalog order, possibly empty.

        Raises:
            CatalogUnavailableError: If the catalog cannot be reached.
        """
        ...
