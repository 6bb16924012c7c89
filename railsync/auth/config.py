from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_LOGIN_PATH = "/login"


@dataclass(frozen=True)
class ClientConfig:
    # Backend
    api_url: str
    http_timeout_seconds: float

    # Durable credential slot. None keeps the credential in process memory only.
    token_file: Optional[str]

    # Where the 401 interceptor and the route guard send unauthenticated users
    login_path: str

    @property
    def durable_credentials(self) -> bool:
        return bool(self.token_file)


def _normalize_path(value: str) -> str:
    p = (value or "").strip()
    if not p:
        return DEFAULT_LOGIN_PATH
    return p if p.startswith("/") else f"/{p}"


@lru_cache(maxsize=1)
def load_client_config() -> ClientConfig:
    """
    Load client configuration from environment variables.

    `RAILSYNC_API_URL` wins over `VITE_API_URL` so the same .env can drive both the
    browser build and this client.
    """
    api_url = (os.getenv("RAILSYNC_API_URL", "") or os.getenv("VITE_API_URL", "") or "").strip() or DEFAULT_API_URL

    timeout_raw = (os.getenv("RAILSYNC_HTTP_TIMEOUT_SECONDS", "") or "10").strip() or "10"
    try:
        timeout = float(timeout_raw)
    except ValueError:
        timeout = 10.0
    if timeout < 1:
        timeout = 1.0

    return ClientConfig(
        api_url=api_url.rstrip("/"),
        http_timeout_seconds=timeout,
        token_file=(os.getenv("RAILSYNC_TOKEN_FILE", "") or "").strip() or None,
        login_path=_normalize_path(os.getenv("RAILSYNC_LOGIN_PATH", "") or DEFAULT_LOGIN_PATH),
    )
