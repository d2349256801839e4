"""Identity provider returning a fixed token."""

from typing import Optional

from ..domain.interfaces.identity_provider import IdentityProvider


class StaticIdentityProvider(IdentityProvider):
    """Identity provider for a token known up front (e.g. from a request header).

    Blank tokens are treated as absent.
    """

    def __init__(self, token: Optional[str] = None):
        self._token = token.strip() if token and token.strip() else None

    def get_token(self) -> Optional[str]:
        return self._token

    def sign_out(self) -> None:
        self._token = None
