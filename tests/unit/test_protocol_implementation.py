"""Test that backend implementations conform to the domain protocols."""

import pytest

from practice_engine.domain.entities import PracticeConfiguration, TargetSpec
from practice_engine.domain.interfaces import (
    CatalogService,
    IdentityProvider,
    MediaPlaybackSurface,
    SessionPersistenceService,
)
from practice_engine.infrastructure.http_catalog_service import HttpCatalogService
from practice_engine.infrastructure.http_session_persistence import HttpSessionPersistence
from practice_engine.infrastructure.local_catalog_service import InMemoryCatalogService
from practice_engine.infrastructure.local_media_surface import InMemoryMediaSurface
from practice_engine.infrastructure.local_session_persistence import InMemorySessionPersistence
from practice_engine.infrastructure.static_identity_provider import StaticIdentityProvider


def test_catalog_services_implement_protocol():
    """Test that both catalog backends implement CatalogService."""
    for catalog in (InMemoryCatalogService(), HttpCatalogService("http://platform.test/api")):
        assert isinstance(catalog, CatalogService)
        assert callable(getattr(catalog, "list_configurations"))
        assert callable(getattr(catalog, "list_clips"))


def test_persistence_services_implement_protocol():
    """Test that both persistence backends implement SessionPersistenceService."""
    for persistence in (
        InMemorySessionPersistence(),
        HttpSessionPersistence("http://platform.test/api"),
    ):
        assert isinstance(persistence, SessionPersistenceService)
        assert callable(getattr(persistence, "submit_session_result"))


def test_identity_provider_implements_protocol():
    provider = StaticIdentityProvider("token-123")
    assert isinstance(provider, IdentityProvider)
    assert provider.get_token() == "token-123"


def test_media_surface_implements_protocol():
    surface = InMemoryMediaSurface()
    assert isinstance(surface, MediaPlaybackSurface)
    assert surface.paused
    assert surface.position == 0.0


@pytest.mark.asyncio
async def test_catalogs_are_interchangeable():
    """Test that callers can use any catalog through the protocol."""
    catalog: CatalogService = InMemoryCatalogService(
        configurations=[
            PracticeConfiguration(
                id="cfg-1",
                activity_type="meditation",
                title="Quiet Mind",
                emotion_tag="calm",
                target=TargetSpec.minutes(5),
                reward_points=8,
            )
        ]
    )
    configurations = await catalog.list_configurations("meditation", "calm")
    assert [c.id for c in configurations] == ["cfg-1"]
    assert await catalog.list_clips("cfg-1") == []
