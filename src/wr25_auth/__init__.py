"""
WR25 OAuth2 provider adapter.

Exposes the provider (WR25Provider), the login/user records (AuthSession,
User), session helpers for group membership (get_user_data, UserData,
require_group, store_user) and the FastAPI auth router factory
(create_auth_router).
"""

from .errors import (
    ConfigurationError,
    GroupsLookupError,
    MissingAccessTokenError,
    NoSessionError,
    ProviderResponseError,
    SessionLookupError,
    SessionUserError,
    TokenExpiredError,
    WR25AuthError,
)
from .models import AuthSession, User
from .router import create_auth_router
from .session import (
    UserData,
    get_user,
    get_user_data,
    require_group,
    store_user,
)
from .wr25 import WR25Provider

__all__ = [
    "WR25Provider",
    "AuthSession",
    "User",
    "UserData",
    "get_user",
    "get_user_data",
    "store_user",
    "require_group",
    "create_auth_router",
    "WR25AuthError",
    "ConfigurationError",
    "MissingAccessTokenError",
    "ProviderResponseError",
    "TokenExpiredError",
    "GroupsLookupError",
    "SessionLookupError",
    "NoSessionError",
    "SessionUserError",
]
