"""
User and login-session records exchanged between the provider and the app.

AuthSession lives for one login attempt: begin_auth creates it with the
authorization URL and authorize fills in the tokens. User is the generic
record produced by fetch_user and kept in the cookie session afterwards.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional


def _dump_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _load_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class User:
    """Generic user record built from the verify endpoint payload.

    Attributes:
        provider: Name of the provider instance that authenticated the user
        user_id: Character ID as a decimal string
        nick_name: Character name
        access_token: Bearer token used against the verify endpoint
        refresh_token: Token for the refresh grant (may be empty)
        expires_at: Access token expiry in UTC, if the provider sent one
        raw_data: Full verify payload, including fields the mapping ignores
    """

    provider: str
    user_id: str = ""
    nick_name: str = ""
    access_token: str = ""
    refresh_token: str = ""
    expires_at: Optional[datetime] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict (expires_at as ISO 8601)."""
        data = asdict(self)
        data["expires_at"] = _dump_datetime(self.expires_at)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        return cls(
            provider=data["provider"],
            user_id=data.get("user_id", ""),
            nick_name=data.get("nick_name", ""),
            access_token=data.get("access_token", ""),
            refresh_token=data.get("refresh_token", ""),
            expires_at=_load_datetime(data.get("expires_at")),
            raw_data=dict(data.get("raw_data") or {}),
        )


@dataclass
class AuthSession:
    """State of one login attempt with the identity provider."""

    auth_url: str = ""
    access_token: str = ""
    refresh_token: str = ""
    expires_at: Optional[datetime] = None

    def get_auth_url(self) -> str:
        """Return the authorization URL; raises ValueError if begin_auth never set it."""
        if not self.auth_url:
            raise ValueError("an auth_url has not been set")
        return self.auth_url

    async def authorize(self, provider, params: Mapping[str, str]) -> str:
        """Exchange the callback's authorization code for tokens via the provider."""
        return await provider.authorize(self, params.get("code", ""))

    def marshal(self) -> str:
        """Serialize to a JSON string for parking in the cookie session."""
        data = asdict(self)
        data["expires_at"] = _dump_datetime(self.expires_at)
        return json.dumps(data)

    @classmethod
    def unmarshal(cls, data: str) -> "AuthSession":
        raw = json.loads(data)
        return cls(
            auth_url=raw.get("auth_url", ""),
            access_token=raw.get("access_token", ""),
            refresh_token=raw.get("refresh_token", ""),
            expires_at=_load_datetime(raw.get("expires_at")),
        )
