"""
Session-based user helpers and FastAPI dependencies.

The auth callback stores the authenticated User in request.session under
"user", tagged with its record kind so a stale or foreign value fails loudly
on the way out. UserData answers group membership questions by asking the
WR25 verify endpoint with the stored access token; groups are never cached.
"""

from typing import List

import httpx
import structlog
from fastapi import HTTPException, Request

from wr25_auth.errors import (
    GroupsLookupError,
    NoSessionError,
    ProviderResponseError,
    SessionLookupError,
    SessionUserError,
    TokenExpiredError,
)
from wr25_auth.models import User
from wr25_auth.wr25 import request_verify

SESSION_USER_KEY = "user"
USER_RECORD_KIND = "wr25.user"

logger = structlog.get_logger(__name__)


def store_user(request: Request, user: User) -> None:
    """Persist the user in the cookie session as a tagged record."""
    request.session[SESSION_USER_KEY] = {"kind": USER_RECORD_KIND, "user": user.to_dict()}


def get_user(request: Request) -> User:
    """
    Return the User stored by store_user.

    Raises NoSessionError when the request has no session (SessionMiddleware
    not installed) and SessionUserError when nothing, or something other than
    a user record, is stored under "user".
    """
    if "session" not in request.scope:
        raise NoSessionError("No sessions found")

    record = request.session.get(SESSION_USER_KEY)
    if not isinstance(record, dict) or record.get("kind") != USER_RECORD_KIND:
        raise SessionUserError("Session hasn't any user stored")
    try:
        return User.from_dict(record["user"])
    except (KeyError, TypeError, ValueError) as e:
        raise SessionUserError("Session hasn't any user stored") from e


class UserData:
    """The logged-in user plus the HTTP client used to query their groups."""

    def __init__(self, user: User, http_client: httpx.AsyncClient):
        self.user = user
        self.http_client = http_client

    async def groups(self) -> List[str]:
        """
        Return the user's group names as reported by the verify endpoint.

        Raises TokenExpiredError on 401 so callers can refresh and retry,
        ProviderResponseError on a 5xx and GroupsLookupError when the body is
        not a {"groups": [...]} object.
        """
        response = await request_verify(self.http_client, self.user.access_token)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            logger.info("groups_token_expired", provider=self.user.provider)
            raise TokenExpiredError()
        if response.status_code >= httpx.codes.INTERNAL_SERVER_ERROR:
            logger.warning("groups_request_rejected", provider=self.user.provider, status_code=response.status_code)
            raise ProviderResponseError(
                f"{self.user.provider} responded with a {response.status_code} trying to fetch groups",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise GroupsLookupError("Couldn't unmarshal response") from e

        if not isinstance(payload, dict):
            raise GroupsLookupError("Couldn't unmarshal response")
        groups = payload.get("groups")
        if groups is None:
            return []
        if not isinstance(groups, list) or not all(isinstance(g, str) for g in groups):
            raise GroupsLookupError("Couldn't unmarshal response")
        return groups

    async def user_in(self, group: str) -> bool:
        """Return True if the user is a member of group (exact match)."""
        for g in await self.groups():
            if g == group:
                return True
        return False


def get_user_data(request: Request, http_client: httpx.AsyncClient) -> UserData:
    """Look up the session user and wrap it for group checks."""
    return UserData(get_user(request), http_client)


def require_group(*groups: str):
    """
    Dependency: user must be in at least one of the given groups (OR semantics).
    Use as: Depends(require_group("alpha", "beta")). The verify call uses
    request.app.state.http_client.
    """
    wanted = [g for g in groups if g]

    async def _dep(request: Request):
        try:
            data = get_user_data(request, request.app.state.http_client)
        except SessionLookupError:
            raise HTTPException(status_code=401, detail="Not authenticated")

        try:
            member_of = set(await data.groups())
        except TokenExpiredError:
            raise HTTPException(status_code=401, detail="Token expired; please log in again")
        except (ProviderResponseError, GroupsLookupError, httpx.HTTPError) as e:
            logger.warning("group_check_failed", error=str(e))
            raise HTTPException(status_code=502, detail="Group lookup failed")

        if not member_of.intersection(wanted):
            raise HTTPException(status_code=403, detail="Forbidden (not in an accepted group)")
        return data

    return _dep
