"""Identity provider interface."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class IdentityProvider(Protocol):
    """Supplies the caller's opaque bearer token, or None when signed out."""

    def get_token(self) -> Optional[str]:
        ...
