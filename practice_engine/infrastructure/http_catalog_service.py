"""Platform REST API implementation of CatalogService."""

import logging
import re
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from ..domain.entities.practice import PracticeClip, PracticeConfiguration, TargetSpec
from ..domain.exceptions import CatalogUnavailableError
from ..domain.interfaces.catalog_service import CatalogService

logger = logging.getLogger(__name__)

CONFIGURATIONS_PATH = "/spiritual-configurations"
CONFIGURATION_CLIPS_PATH = "/spiritual-clips/configuration/{configuration_id}"

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*(minutes?|mins?|m|hours?|hrs?|h)?\s*$", re.IGNORECASE)


def parse_duration_minutes(value: Any) -> Optional[int]:
    """Parse a catalog duration such as "5 minutes", "1 hour" or 10 into minutes."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if not isinstance(value, str):
        return None

    match = _DURATION_PATTERN.match(value)
    if not match:
        return None
    amount = int(match.group(1))
    unit = (match.group(2) or "minutes").lower()
    minutes = amount * 60 if unit.startswith("h") else amount
    return minutes if minutes > 0 else None


class HttpCatalogService(CatalogService):
    """Reads practice configurations and clips from the platform API.

    Inactive or deleted entries are skipped, as are entries whose target
    cannot be understood.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = 10.0,
        auth_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the catalog client.

        Args:
            base_url: Base URL of the platform API (e.g. http://localhost:5000/api).
            timeout: Request timeout in seconds.
            auth_token: Optional bearer token sent with catalog requests.
            client: Optional pre-configured client (used in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.auth_token = auth_token
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    async def _get_items(self, path: str, params: Optional[Dict[str, str]] = None) -> list[dict]:
        try:
            resp = await self._get_client().get(path, params=params, headers=self._headers())
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as e:
            raise CatalogUnavailableError(f"Catalog request {path} failed: {e}") from e
        except ValueError as e:
            raise CatalogUnavailableError(f"Catalog response for {path} is not JSON") from e

        if not isinstance(body, dict) or body.get("success") is False:
            message = body.get("message") if isinstance(body, dict) else body
            raise CatalogUnavailableError(f"Catalog request {path} failed: {message}")
        data = body.get("data") or []
        if not isinstance(data, list):
            raise CatalogUnavailableError(f"Catalog response for {path} has no item list")
        return data

    async def list_configurations(
        self,
        activity_type: str,
        emotion_tag: Optional[str] = None,
    ) -> list[PracticeConfiguration]:
        """List active configurations for an activity, in server order.

        Args:
            activity_type: Activity to list configurations for.
            emotion_tag: Optional emotion to narrow the listing.

        Returns:
            list[PracticeConfiguration]: Parsed configurations.

        Raises:
            CatalogUnavailableError: If the API cannot be reached or fails.
        """
        items = await self._get_items(CONFIGURATIONS_PATH, params={"type": activity_type})
        emotion = emotion_tag.strip().lower() if emotion_tag else None

        configurations = []
        for item in items:
            if not isinstance(item, dict):
                logger.warning(f"Skipping malformed configuration entry: {item!r}")
                continue
            if item.get("isActive") is False or item.get("isDeleted"):
                continue
            configuration = self._item_to_configuration(item, activity_type)
            if configuration is None:
                continue
            if emotion is not None and configuration.emotion_tag != emotion:
                continue
            configurations.append(configuration)

        logger.debug(f"Loaded {len(configurations)} {activity_type} configurations")
        return configurations

    async def list_clips(self, configuration_id: str) -> list[PracticeClip]:
        """List active clips of a configuration, in server order.

        Args:
            configuration_id: Identifier of the configuration.

        Returns:
            list[PracticeClip]: Parsed clips.

        Raises:
            CatalogUnavailableError: If the API cannot be reached or fails.
        """
        path = CONFIGURATION_CLIPS_PATH.format(configuration_id=configuration_id)
        items = await self._get_items(path)

        clips = []
        for item in items:
            if not isinstance(item, dict):
                logger.warning(f"Skipping malformed clip entry for {configuration_id}: {item!r}")
                continue
            if item.get("isActive") is False:
                continue
            clip = self._item_to_clip(item, configuration_id)
            if clip is not None:
                clips.append(clip)
        return clips

    def _item_to_configuration(
        self, item: Dict[str, Any], activity_type: str
    ) -> Optional[PracticeConfiguration]:
        """Convert an API item to a PracticeConfiguration, or None if unusable."""
        config_id = item.get("_id") or item.get("id")
        count = item.get("targetCount") or item.get("chantCount")
        try:
            if count:
                target = TargetSpec.count(int(count))
            else:
                minutes = parse_duration_minutes(item.get("duration"))
                if minutes is None:
                    logger.warning(
                        f"Skipping configuration {config_id}: unreadable duration {item.get('duration')!r}"
                    )
                    return None
                target = TargetSpec.minutes(minutes)

            return PracticeConfiguration(
                id=str(config_id),
                activity_type=item.get("type") or activity_type,
                title=item.get("title") or "",
                emotion_tag=item.get("emotion") or "",
                target=target,
                reward_points=int(item.get("karmaPoints") or 0),
            )
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning(f"Skipping configuration {config_id}: {e}")
            return None

    def _item_to_clip(self, item: Dict[str, Any], configuration_id: str) -> Optional[PracticeClip]:
        """Convert an API item to a PracticeClip, preferring presigned URLs."""
        clip_id = item.get("_id") or item.get("id")
        try:
            return PracticeClip(
                id=str(clip_id),
                configuration_id=configuration_id,
                title=item.get("title") or "",
                description=item.get("description") or None,
                video_url=item.get("videoPresignedUrl") or item.get("videoUrl") or None,
                audio_url=item.get("audioPresignedUrl") or item.get("audioUrl") or None,
                video_key=item.get("videoKey") or None,
                audio_key=item.get("audioKey") or None,
            )
        except ValidationError as e:
            logger.warning(f"Skipping clip {clip_id}: {e}")
            return None

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
