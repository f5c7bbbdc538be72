"""
Exceptions raised by the WR25 provider adapter.

Transport failures surface as httpx.HTTPError and token endpoint rejections as
Authlib's OAuthError; neither is wrapped here.
"""

from typing import Optional


class WR25AuthError(Exception):
    """Base class for adapter errors."""


class ConfigurationError(WR25AuthError):
    """Provider configuration is missing required values."""


class MissingAccessTokenError(WR25AuthError):
    """A profile fetch was attempted before the code exchange produced a token."""

    def __init__(self, message: str, user=None):
        super().__init__(message)
        self.user = user


class ProviderResponseError(WR25AuthError):
    """The verify endpoint answered with an unexpected HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TokenExpiredError(ProviderResponseError):
    """The verify endpoint answered 401; refresh the token or log in again."""

    def __init__(self, message: str = "Not authorized, most likely the token has timed out"):
        super().__init__(message, status_code=401)


class GroupsLookupError(WR25AuthError):
    """The groups payload could not be read or decoded."""


class SessionLookupError(WR25AuthError):
    """Base class for cookie session lookup failures."""


class NoSessionError(SessionLookupError):
    """The request carries no session at all."""


class SessionUserError(SessionLookupError):
    """The session exists but holds no user record."""
