"""
FastAPI app: WR25 OAuth login + session-based group checks.

Decisions:
- .env is loaded before importing wr25_auth so WR25_* and SESSION_SECRET are
  available when the provider is built (Ruff E402 suppressed for that).
- One httpx.AsyncClient is shared by the provider and the group checks and is
  closed with the app's lifespan.
- Group names below are whatever the WR25 verify endpoint reports under "groups".
"""

from contextlib import asynccontextmanager

import httpx
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware

load_dotenv()

# Load .env before wr25_auth so WR25_* and SESSION_SECRET are set; Ruff E402.
from wr25_auth import WR25Provider, create_auth_router, get_user, require_group  # noqa: E402
from wr25_auth.config import load_provider_settings, session_secret  # noqa: E402
from wr25_auth.errors import SessionLookupError  # noqa: E402
from wr25_auth.logging_config import configure_logging  # noqa: E402

configure_logging()

http_client = httpx.AsyncClient(timeout=20)
settings = load_provider_settings()
provider = WR25Provider(
    settings.client_id,
    settings.client_secret,
    settings.callback_url,
    *settings.scopes,
    http_client=http_client,
    name=settings.name,
    oauth_client_kwargs={"timeout": 20},
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.http_client = http_client
    yield
    await http_client.aclose()


app = FastAPI(lifespan=lifespan)
app.add_middleware(SessionMiddleware, secret_key=session_secret())
app.include_router(create_auth_router(provider))


@app.get("/")
async def home(request: Request):
    try:
        user = get_user(request)
    except SessionLookupError:
        return {"logged_in": False, "user": None}
    return {"logged_in": True, "user": user.nick_name}


# Example protected routes (require membership in WR25 groups)
@app.get("/directors")
async def directors_area(_=Depends(require_group("directors"))):
    return {"ok": True, "area": "directors"}


@app.get("/fleet")
async def fleet_area(_=Depends(require_group("fleet-commanders", "directors"))):
    return {"ok": True, "area": "fleet commanders or directors"}
