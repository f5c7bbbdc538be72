"""
FastAPI auth router: login, callback, /me, logout.

Builds an APIRouter around one or more OAuth providers, addressed by their
name in the URL, and keeps the authenticated user in the cookie session.
"""

import secrets

import structlog
from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from wr25_auth.errors import ProviderResponseError, SessionLookupError
from wr25_auth.protocol import OAuthProvider
from wr25_auth.session import get_user, store_user

logger = structlog.get_logger(__name__)


def create_auth_router(*providers: OAuthProvider) -> APIRouter:
    """Create an APIRouter with /auth/{name}/login, /auth/{name}/callback, /me and /logout."""
    if not providers:
        raise ValueError("create_auth_router needs at least one provider")
    by_name = {p.name: p for p in providers}
    if len(by_name) != len(providers):
        raise ValueError("create_auth_router got two providers with the same name")
    router = APIRouter()

    def _provider(name: str) -> OAuthProvider:
        if name not in by_name:
            raise HTTPException(status_code=404, detail=f"Unknown provider {name}")
        return by_name[name]

    @router.get("/auth/{name}/login")
    async def login(name: str, request: Request):
        """Redirect the user to the provider's authorization page."""
        provider = _provider(name)
        state = secrets.token_urlsafe(32)
        auth_session = provider.begin_auth(state)
        request.session[f"{name}_state"] = state
        request.session[f"{name}_auth"] = auth_session.marshal()
        return RedirectResponse(url=auth_session.get_auth_url())

    @router.get("/auth/{name}/callback")
    async def auth_callback(name: str, request: Request):
        """Handle OAuth callback: exchange code for token, store the user, redirect to /me."""
        provider = _provider(name)
        expected_state = request.session.pop(f"{name}_state", None)
        saved = request.session.pop(f"{name}_auth", None)
        if not expected_state or saved is None or request.query_params.get("state") != expected_state:
            return JSONResponse({"error": "state mismatch"}, status_code=400)

        auth_session = provider.unmarshal_session(saved)
        try:
            await auth_session.authorize(provider, request.query_params)
            user = await provider.fetch_user(auth_session)
        except OAuthError as e:
            return JSONResponse({"error": str(e)}, status_code=400)
        except ProviderResponseError as e:
            return JSONResponse({"error": str(e)}, status_code=502)

        store_user(request, user)
        logger.info("user_logged_in", provider=name, user_id=user.user_id)
        return RedirectResponse(url="/me")

    @router.get("/me")
    async def me(request: Request):
        """Return the current user; redirect to the first provider's login if not authenticated."""
        try:
            user = get_user(request)
        except SessionLookupError:
            return RedirectResponse(url=f"/auth/{providers[0].name}/login")
        return {
            "provider": user.provider,
            "user_id": user.user_id,
            "nick_name": user.nick_name,
            "expires_at": user.expires_at.isoformat() if user.expires_at else None,
        }

    @router.get("/logout")
    async def logout(request: Request):
        """Clear session and redirect to home."""
        request.session.clear()
        return RedirectResponse(url="/")

    return router
