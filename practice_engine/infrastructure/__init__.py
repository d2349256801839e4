"""Infrastructure layer components."""

from .http_catalog_service import HttpCatalogService
from .http_session_persistence import HttpSessionPersistence
from .local_catalog_service import InMemoryCatalogService
from .local_media_surface import InMemoryMediaSurface
from .local_session_persistence import InMemorySessionPersistence
from .static_identity_provider import StaticIdentityProvider

__all__ = [
    "HttpCatalogService",
    "HttpSessionPersistence",
    "InMemoryCatalogService",
    "InMemoryMediaSurface",
    "InMemorySessionPersistence",
    "StaticIdentityProvider",
]
