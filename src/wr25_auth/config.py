"""
Environment configuration for the WR25 provider and the host app.

Values are read from the process environment; main.py loads .env first with
python-dotenv. Required: WR25_CLIENT_ID, WR25_CLIENT_SECRET, WR25_CALLBACK_URL.
"""

import os
import re
from dataclasses import dataclass
from typing import Tuple

from wr25_auth.errors import ConfigurationError
from wr25_auth.wr25 import DEFAULT_NAME

REQUIRED_VARS = ("WR25_CLIENT_ID", "WR25_CLIENT_SECRET", "WR25_CALLBACK_URL")


@dataclass(frozen=True)
class ProviderSettings:
    client_id: str
    client_secret: str
    callback_url: str
    scopes: Tuple[str, ...] = ()
    name: str = DEFAULT_NAME


def _split_scopes(raw: str) -> Tuple[str, ...]:
    """Scopes may be separated by spaces, commas or both."""
    return tuple(s for s in re.split(r"[\s,]+", raw) if s)


def load_provider_settings() -> ProviderSettings:
    """Build ProviderSettings from WR25_* variables; raise ConfigurationError if any required one is unset."""
    missing = [var for var in REQUIRED_VARS if not os.getenv(var)]
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    return ProviderSettings(
        client_id=os.environ["WR25_CLIENT_ID"],
        client_secret=os.environ["WR25_CLIENT_SECRET"],
        callback_url=os.environ["WR25_CALLBACK_URL"],
        scopes=_split_scopes(os.getenv("WR25_SCOPES", "")),
        name=os.getenv("WR25_PROVIDER_NAME") or DEFAULT_NAME,
    )


def session_secret() -> str:
    """Cookie signing key. The "change-me" default is for development only."""
    return os.getenv("SESSION_SECRET", "change-me")


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def log_json() -> bool:
    """JSON log lines unless LOG_JSON is 0/false/no."""
    return os.getenv("LOG_JSON", "1").lower() not in ("0", "false", "no")
