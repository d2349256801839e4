"""Collaborator interfaces consumed by the practice session engine."""

from .catalog_service import CatalogService
from .identity_provider import IdentityProvider
from .media_surface import MediaPlaybackSurface
from .session_persistence import SessionPersistenceService

__all__ = [
    "CatalogService",
    "IdentityProvider",
    "MediaPlaybackSurface",
    "SessionPersistenceService",
]
