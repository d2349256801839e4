"""Tests for HttpCatalogService using httpx.MockTransport."""

import httpx
import pytest

from practice_engine.domain.entities import PracticeMode, TargetSpec
from practice_engine.domain.exceptions import CatalogUnavailableError
from practice_engine.domain.services.content_matcher import ContentMatcher
from practice_engine.infrastructure.http_catalog_service import (
    HttpCatalogService,
    parse_duration_minutes,
)

BASE_URL = "http://platform.test/api"

CONFIGURATIONS = [
    {
        "_id": "cfg-1",
        "type": "meditation",
        "title": "Joyful Breath",
        "emotion": "Happy",
        "duration": "5 minutes",
        "karmaPoints": 10,
        "isActive": True,
    },
    {
        "_id": "cfg-2",
        "type": "meditation",
        "title": "Retired",
        "emotion": "happy",
        "duration": "3 minutes",
        "karmaPoints": 5,
        "isActive": False,
    },
    {
        "_id": "cfg-3",
        "type": "meditation",
        "title": "Unreadable",
        "emotion": "happy",
        "duration": "a while",
        "karmaPoints": 5,
    },
    {
        "_id": "cfg-4",
        "type": "meditation",
        "title": "Evening Rest",
        "emotion": "sad",
        "duration": 8,
        "karmaPoints": 12,
    },
    {
        "_id": "cfg-5",
        "type": "chanting",
        "title": "Om",
        "emotion": "stressed",
        "chantCount": 108,
        "karmaPoints": 15,
        "isDeleted": True,
    },
]

CLIPS = [
    {
        "_id": "clip-1",
        "title": "Joy",
        "videoUrl": "https://bucket.example.com/videos/joy.mp4",
        "videoPresignedUrl": "https://bucket.example.com/videos/joy.mp4?sig=abc",
        "videoKey": "videos/joy.mp4",
        "audioUrl": "https://bucket.example.com/audio/joy.mp3",
        "audioKey": "audio/joy.mp3",
    },
    {"_id": "clip-2", "title": "Hidden", "isActive": False},
]


def make_service(handler, **kwargs):
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return HttpCatalogService(BASE_URL, client=client, **kwargs)


def platform_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/spiritual-configurations":
        return httpx.Response(200, json={"success": True, "data": CONFIGURATIONS})
    if request.url.path == "/api/spiritual-clips/configuration/cfg-1":
        return httpx.Response(200, json={"success": True, "data": CLIPS})
    return httpx.Response(404, json={"success": False, "message": "Not found"})


class TestParseDurationMinutes:
    """Tests for catalog duration parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("5 minutes", 5),
            ("1 minute", 1),
            ("10", 10),
            ("15 min", 15),
            ("1 hour", 60),
            (7, 7),
        ],
    )
    def test_valid_values(self, value, expected):
        assert parse_duration_minutes(value) == expected

    @pytest.mark.parametrize("value", ["", "five minutes", "0 minutes", -3, 0, None, True, 2.5])
    def test_invalid_values(self, value):
        assert parse_duration_minutes(value) is None


@pytest.mark.asyncio
async def test_list_configurations_filters_and_parses():
    """Test that inactive, deleted and unreadable entries are skipped."""
    service = make_service(platform_handler)

    configurations = await service.list_configurations("meditation")

    assert [c.id for c in configurations] == ["cfg-1", "cfg-4"]
    assert configurations[0].emotion_tag == "happy"
    assert configurations[0].target.value == 5
    assert configurations[0].reward_points == 10
    assert configurations[1].target.mode == PracticeMode.DURATION
    await service.close()


@pytest.mark.asyncio
async def test_list_configurations_by_emotion():
    service = make_service(platform_handler)
    configurations = await service.list_configurations("meditation", emotion_tag="Sad")
    assert [c.id for c in configurations] == ["cfg-4"]


@pytest.mark.asyncio
async def test_request_carries_type_and_token():
    """Test the query parameter and bearer header."""
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": []})

    service = make_service(handler, auth_token="catalog-token")
    assert await service.list_configurations("chanting") == []

    assert seen[0].url.params["type"] == "chanting"
    assert seen[0].headers["Authorization"] == "Bearer catalog-token"


@pytest.mark.asyncio
async def test_count_configuration():
    def handler(request):
        return httpx.Response(
            200,
            json={"success": True, "data": [
                {"_id": "c", "emotion": "calm", "targetCount": 54, "karmaPoints": 8, "title": "Om"}
            ]},
        )

    service = make_service(handler)
    configurations = await service.list_configurations("chanting")

    assert configurations[0].target.mode == PracticeMode.COUNT
    assert configurations[0].target.value == 54
    assert configurations[0].activity_type == "chanting"


@pytest.mark.asyncio
async def test_list_clips_prefers_presigned_urls():
    """Test that presigned URLs win over plain URLs and keys are kept."""
    service = make_service(platform_handler)

    clips = await service.list_clips("cfg-1")

    assert len(clips) == 1
    clip = clips[0]
    assert clip.video_url.endswith("?sig=abc")
    assert clip.audio_url == "https://bucket.example.com/audio/joy.mp3"
    assert clip.video_key == "videos/joy.mp4"
    assert clip.configuration_id == "cfg-1"


@pytest.mark.asyncio
async def test_http_error_status_is_unavailable():
    service = make_service(lambda request: httpx.Response(503, text="Service Unavailable"))
    with pytest.raises(CatalogUnavailableError):
        await service.list_configurations("meditation")


@pytest.mark.asyncio
async def test_success_false_is_unavailable():
    service = make_service(
        lambda request: httpx.Response(200, json={"success": False, "message": "Database error"})
    )
    with pytest.raises(CatalogUnavailableError):
        await service.list_clips("cfg-1")


@pytest.mark.asyncio
async def test_non_json_body_is_unavailable():
    service = make_service(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(CatalogUnavailableError):
        await service.list_configurations("meditation")


@pytest.mark.asyncio
async def test_transport_error_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = make_service(handler)
    with pytest.raises(CatalogUnavailableError):
        await service.list_configurations("meditation")


@pytest.mark.asyncio
async def test_malformed_items_are_skipped():
    """Test that entries which are not objects are skipped, not fatal."""
    def handler(request):
        if request.url.path.startswith("/api/spiritual-clips"):
            return httpx.Response(200, json={"success": True, "data": [42, {"_id": "clip-1"}]})
        return httpx.Response(
            200,
            json={"success": True, "data": [
                "oops",
                None,
                {"_id": "cfg-1", "emotion": "calm", "duration": "5 minutes", "karmaPoints": 9},
            ]},
        )

    service = make_service(handler)

    configurations = await service.list_configurations("meditation")
    clips = await service.list_clips("cfg-1")

    assert [c.id for c in configurations] == ["cfg-1"]
    assert [c.id for c in clips] == ["clip-1"]


@pytest.mark.asyncio
async def test_unusable_catalog_falls_back_to_default_reward():
    """Test that a catalog with nothing usable still yields a selection."""
    service = make_service(
        lambda request: httpx.Response(200, json={"success": True, "data": ["oops"]})
    )

    selection = await ContentMatcher().select_content("calm", TargetSpec.minutes(5), service)

    assert not selection.matched
    assert selection.full_reward == 8
