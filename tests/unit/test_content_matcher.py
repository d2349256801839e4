"""Tests for ContentMatcher and DebouncedContentMatcher."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from practice_engine.domain.entities import PracticeClip, PracticeConfiguration, TargetSpec
from practice_engine.domain.exceptions import CatalogUnavailableError
from practice_engine.domain.services.content_matcher import (
    ContentMatcher,
    DebouncedContentMatcher,
)
from practice_engine.infrastructure.local_catalog_service import InMemoryCatalogService


def config(config_id, emotion, target, reward=10, activity="meditation"):
    return PracticeConfiguration(
        id=config_id,
        activity_type=activity,
        title=f"Config {config_id}",
        emotion_tag=emotion,
        target=target,
        reward_points=reward,
    )


def clip(clip_id, config_id, **kwargs):
    return PracticeClip(id=clip_id, configuration_id=config_id, title=f"Clip {clip_id}", **kwargs)


@pytest.fixture
def matcher():
    return ContentMatcher()


@pytest.fixture
def catalog():
    """Create a catalog with a mix of emotions and targets."""
    return InMemoryCatalogService(
        configurations=[
            config("happy-3", "happy", TargetSpec.minutes(3), reward=6),
            config("happy-5", "happy", TargetSpec.minutes(5), reward=10),
            config("happy-8", "happy", TargetSpec.minutes(8), reward=14),
            config("sad-4", "sad", TargetSpec.minutes(4), reward=7),
            config("sad-6", "sad", TargetSpec.minutes(6), reward=9),
            config("stressed-108", "stressed", TargetSpec.count(108), reward=16, activity="chanting"),
            config("stressed-54", "stressed", TargetSpec.count(54), reward=8, activity="chanting"),
        ],
        clips=[
            clip("c-happy-5", "happy-5", video_url="https://cdn.example.com/happy.mp4"),
            clip("c-happy-5b", "happy-5", audio_url="https://cdn.example.com/happy.mp3"),
            clip("c-sad-6", "sad-6", audio_url="https://cdn.example.com/sad.mp3"),
        ],
    )


class TestMatchConfigurations:
    """Tests for the pure matching step."""

    @pytest.mark.parametrize("minutes", range(1, 11))
    def test_duration_picks_closest(self, matcher, minutes):
        configurations = [
            config("a", "calm", TargetSpec.minutes(2)),
            config("b", "calm", TargetSpec.minutes(5)),
            config("c", "calm", TargetSpec.minutes(9)),
        ]
        matched = matcher.match_configurations(configurations, "calm", TargetSpec.minutes(minutes))
        best = min(abs(c.target.value - minutes) for c in configurations)
        assert matched
        assert abs(matched[0].target.value - minutes) == best
        first_best = next(c for c in configurations if abs(c.target.value - minutes) == best)
        assert matched[0].id == first_best.id

    def test_exact_match_wins(self, matcher, catalog):
        configurations = asyncio.run(catalog.list_configurations("meditation"))
        matched = matcher.match_configurations(configurations, "happy", TargetSpec.minutes(5))
        assert [c.id for c in matched] == ["happy-5"]

    def test_tie_keeps_catalog_order(self, matcher):
        configurations = [
            config("four", "sad", TargetSpec.minutes(4)),
            config("six", "sad", TargetSpec.minutes(6)),
        ]
        matched = matcher.match_configurations(configurations, "sad", TargetSpec.minutes(5))
        assert [c.id for c in matched] == ["four", "six"]

    def test_emotion_must_match(self, matcher):
        configurations = [config("a", "angry", TargetSpec.minutes(5))]
        assert matcher.match_configurations(configurations, "calm", TargetSpec.minutes(5)) == []

    def test_emotion_is_case_insensitive(self, matcher):
        configurations = [config("a", "Calm", TargetSpec.minutes(5))]
        assert len(matcher.match_configurations(configurations, " CALM ", TargetSpec.minutes(5))) == 1

    def test_count_requires_exact_match(self, matcher):
        configurations = [config("a", "calm", TargetSpec.count(108))]
        assert matcher.match_configurations(configurations, "calm", TargetSpec.count(216)) == []

    def test_modes_do_not_mix(self, matcher):
        configurations = [config("a", "calm", TargetSpec.count(5))]
        assert matcher.match_configurations(configurations, "calm", TargetSpec.minutes(5)) == []


@pytest.mark.asyncio
async def test_exact_match_with_first_clip(matcher, catalog):
    """Test that an exact match selects its first clip."""
    selection = await matcher.select_content("happy", TargetSpec.minutes(5), catalog)

    assert selection.matched
    assert selection.configuration.id == "happy-5"
    assert selection.clip.id == "c-happy-5"
    assert selection.full_reward == 10
    assert selection.catalog_available


@pytest.mark.asyncio
async def test_nearest_match_without_clips(matcher, catalog):
    """Test that a configuration without clips is still selected."""
    selection = await matcher.select_content("happy", TargetSpec.minutes(2), catalog)

    assert selection.configuration.id == "happy-3"
    assert selection.clip is None
    assert selection.full_reward == 6


@pytest.mark.asyncio
async def test_tied_configurations_take_first_with_clips(matcher, catalog):
    """Test that clips come from the first tied configuration that has any."""
    selection = await matcher.select_content("sad", TargetSpec.minutes(5), catalog)

    assert selection.configuration.id == "sad-6"
    assert selection.clip.id == "c-sad-6"
    assert selection.full_reward == 9


@pytest.mark.asyncio
async def test_count_exact_match(matcher, catalog):
    """Test count mode matching."""
    selection = await matcher.select_content(
        "stressed", TargetSpec.count(108), catalog, activity_type="chanting"
    )
    assert selection.configuration.id == "stressed-108"
    assert selection.full_reward == 16


@pytest.mark.asyncio
async def test_no_match_uses_fallback(matcher, catalog):
    """Test the fallback reward when nothing matches."""
    selection = await matcher.select_content("calm", TargetSpec.minutes(5), catalog)

    assert not selection.matched
    assert selection.clip is None
    assert selection.full_reward == 8
    assert selection.catalog_available


@pytest.mark.asyncio
async def test_count_without_match_uses_fallback(matcher, catalog):
    selection = await matcher.select_content(
        "stressed", TargetSpec.count(216), catalog, activity_type="chanting"
    )
    assert not selection.matched
    assert selection.full_reward == 21


@pytest.mark.asyncio
async def test_catalog_unavailable_uses_fallback(matcher):
    """Test that catalog failures are absorbed."""
    catalog = AsyncMock()
    catalog.list_configurations.side_effect = CatalogUnavailableError("down")

    selection = await matcher.select_content("happy", TargetSpec.minutes(10), catalog)

    assert not selection.matched
    assert not selection.catalog_available
    assert selection.full_reward == 15
    catalog.list_clips.assert_not_called()


@pytest.mark.asyncio
async def test_clip_lookup_failure_is_absorbed(matcher):
    """Test that a failed clip query counts as no clips."""
    catalog = AsyncMock()
    catalog.list_configurations.return_value = [
        config("a", "happy", TargetSpec.minutes(5)),
        config("b", "happy", TargetSpec.minutes(5)),
    ]
    catalog.list_clips.side_effect = [
        CatalogUnavailableError("timeout"),
        [clip("clip-b", "b")],
    ]

    selection = await matcher.select_content("happy", TargetSpec.minutes(5), catalog)

    assert selection.configuration.id == "b"
    assert selection.clip.id == "clip-b"
    assert catalog.list_clips.await_count == 2


@pytest.mark.asyncio
async def test_selection_does_not_mutate_catalog(matcher, catalog):
    """Test that selection is side-effect free and repeatable."""
    before = await catalog.list_configurations("meditation")
    first = await matcher.select_content("happy", TargetSpec.minutes(5), catalog)
    second = await matcher.select_content("happy", TargetSpec.minutes(5), catalog)

    assert first == second
    assert await catalog.list_configurations("meditation") == before


@pytest.mark.asyncio
async def test_debounce_drops_superseded_requests(catalog):
    """Test that only the last of several rapid requests is answered."""
    debounced = DebouncedContentMatcher(ContentMatcher(), catalog, delay=0.05)

    results = await asyncio.gather(
        debounced.request("sad", TargetSpec.minutes(5)),
        debounced.request("happy", TargetSpec.minutes(2)),
        debounced.request("happy", TargetSpec.minutes(5)),
    )

    assert results[0] is None
    assert results[1] is None
    assert results[2].configuration.id == "happy-5"
    assert debounced.latest == results[2]


@pytest.mark.asyncio
async def test_debounce_answers_spaced_requests(catalog):
    """Test that requests outside the debounce window are all answered."""
    debounced = DebouncedContentMatcher(ContentMatcher(), catalog, delay=0.01)

    first = await debounced.request("happy", TargetSpec.minutes(5))
    second = await debounced.request("sad", TargetSpec.minutes(6))

    assert first.configuration.id == "happy-5"
    assert second.configuration.id == "sad-6"
