"""
WR25 OAuth2 provider.

Uses Authlib's httpx client for the authorization-code and refresh-token
grants, and the WR25 verify endpoint to resolve the character behind an access
token. Settings come from WR25_CLIENT_ID, WR25_CLIENT_SECRET and
WR25_CALLBACK_URL (see config.py).
"""

from datetime import datetime, timezone
from typing import Optional

import httpx
import structlog
from authlib.integrations.base_client import OAuthError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri

from wr25_auth.errors import ConfigurationError, MissingAccessTokenError, ProviderResponseError
from wr25_auth.models import AuthSession, User
from wr25_auth.protocol import OAuthProvider

AUTH_URL = "https://auth.wr25.org/oauth/authorize/"
TOKEN_URL = "https://auth.wr25.org/oauth/token"
VERIFY_URL = "https://auth.wr25.org/oauth/verify"

DEFAULT_NAME = "authwr25"

logger = structlog.get_logger(__name__)


async def request_verify(http_client: httpx.AsyncClient, access_token: str) -> httpx.Response:
    """GET the verify endpoint with the bearer token. Transport errors propagate."""
    try:
        return await http_client.get(VERIFY_URL, headers={"Authorization": f"Bearer {access_token}"})
    except httpx.HTTPError as e:
        logger.warning("verify_request_failed", error=str(e))
        raise


def _token_expiry(token) -> Optional[datetime]:
    expires_at = token.get("expires_at")
    if not expires_at:
        return None
    return datetime.fromtimestamp(int(expires_at), tz=timezone.utc)


class WR25Provider(OAuthProvider):
    """OAuth provider for WR25 (auth.wr25.org) characters."""

    def __init__(
        self,
        client_key: str,
        secret: str,
        callback_url: str,
        *scopes: str,
        http_client: httpx.AsyncClient,
        name: str = DEFAULT_NAME,
        oauth_client_kwargs: Optional[dict] = None,
    ):
        """
        Store client credentials and the shared HTTP client.

        http_client is used for verify calls and may be shared between
        providers. Token endpoint calls go through a fresh AsyncOAuth2Client per
        call, built with oauth_client_kwargs (e.g. timeout, transport).
        Reassign name to run several WR25 providers side by side.
        """
        if not client_key:
            raise ConfigurationError("WR25 provider needs a client key")
        if not callback_url:
            raise ConfigurationError("WR25 provider needs a callback URL")
        self.client_key = client_key
        self.secret = secret
        self.callback_url = callback_url
        self.scopes = tuple(scopes)
        self.http_client = http_client
        self.name = name
        self.oauth_client_kwargs = dict(oauth_client_kwargs or {})

    def _oauth_client(self, token: Optional[dict] = None) -> AsyncOAuth2Client:
        return AsyncOAuth2Client(
            client_id=self.client_key,
            client_secret=self.secret,
            scope=" ".join(self.scopes) or None,
            redirect_uri=self.callback_url,
            token=token,
            token_endpoint=TOKEN_URL,
            **self.oauth_client_kwargs,
        )

    def begin_auth(self, state: str) -> AuthSession:
        """Return a login session whose auth_url points at the WR25 authorize page."""
        url = prepare_grant_uri(
            AUTH_URL,
            self.client_key,
            "code",
            redirect_uri=self.callback_url,
            scope=list(self.scopes) or None,
            state=state,
        )
        return AuthSession(auth_url=url)

    def unmarshal_session(self, data: str) -> AuthSession:
        return AuthSession.unmarshal(data)

    async def authorize(self, session: AuthSession, code: str) -> str:
        """Exchange an authorization code for tokens and store them on the session."""
        async with self._oauth_client() as client:
            token = await client.fetch_token(TOKEN_URL, grant_type="authorization_code", code=code)

        session.access_token = token["access_token"]
        session.refresh_token = token.get("refresh_token") or ""
        session.expires_at = _token_expiry(token)
        logger.info("authorization_code_exchanged", provider=self.name)
        return session.access_token

    async def fetch_user(self, session: AuthSession) -> User:
        """
        Resolve the character behind the session's access token.

        Only CharacterID and CharacterName are mapped; the rest of the verify
        payload (owner hash, scopes, token type, expiry) is kept in raw_data.
        """
        user = User(
            provider=self.name,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
        )

        if not user.access_token:
            # data is not yet retrieved since the access token is still empty
            raise MissingAccessTokenError(
                f"{self.name} cannot get user information without accessToken", user=user
            )

        response = await request_verify(self.http_client, user.access_token)
        if response.status_code != httpx.codes.OK:
            logger.warning("verify_request_rejected", provider=self.name, status_code=response.status_code)
            raise ProviderResponseError(
                f"{self.name} responded with a {response.status_code} trying to fetch user information",
                status_code=response.status_code,
            )

        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"{self.name} verify payload is not a JSON object")

        user.raw_data = payload
        user.nick_name = payload.get("CharacterName") or ""
        character_id = payload.get("CharacterID", 0)
        if isinstance(character_id, bool) or not isinstance(character_id, int):
            raise ValueError(f"{self.name} verify payload has a non-integer CharacterID")
        user.user_id = str(character_id)
        return user

    def refresh_token_available(self) -> bool:
        """WR25 always issues refresh tokens."""
        return True

    async def refresh_token(self, refresh_token: str):
        """
        Trade a refresh token for a new access token.

        The client starts from a token holding only the refresh token.
        Returns Authlib's OAuth2Token (access_token, refresh_token, expires_at).
        A rejected refresh token raises OAuthError; the caller has to restart
        the login flow. Nothing is retried here.
        """
        try:
            async with self._oauth_client(token={"refresh_token": refresh_token}) as client:
                token = await client.refresh_token(TOKEN_URL, refresh_token=refresh_token)
        except (OAuthError, httpx.HTTPError) as e:
            logger.warning("token_refresh_failed", provider=self.name, error=str(e))
            raise

        logger.info("token_refreshed", provider=self.name)
        return token
