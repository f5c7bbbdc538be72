"""
Protocol for OAuth providers used by the auth router.

Implementations (e.g. WR25Provider) must build the authorization URL, exchange
the callback code for tokens and turn those tokens into a User.
"""

from typing import Protocol, runtime_checkable

from wr25_auth.models import AuthSession, User


@runtime_checkable
class OAuthProvider(Protocol):
    """Protocol for an OAuth2 provider (e.g. WR25)."""

    name: str

    def begin_auth(self, state: str) -> AuthSession:
        """Return a new login session holding the provider's authorization URL."""
        ...

    def unmarshal_session(self, data: str) -> AuthSession:
        """Restore a login session saved with AuthSession.marshal()."""
        ...

    async def authorize(self, session: AuthSession, code: str) -> str:
        """Exchange the authorization code, fill the session and return the access token."""
        ...

    async def fetch_user(self, session: AuthSession) -> User:
        """Fetch the user profile for an authorized session."""
        ...

    def refresh_token_available(self) -> bool:
        ...

    async def refresh_token(self, refresh_token: str):
        ...
