"""
Pytest config.

Local imports like `import railsync` rely on the repo root being on sys.path. When invoking a
global `pytest` entrypoint that doesn't happen reliably during collection, so we pin it here.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()

from railsync.auth.config import load_client_config  # noqa: E402
from railsync.auth.gateway import HttpGateway  # noqa: E402
from railsync.auth.storage import CredentialCarrier, MemoryStorage  # noqa: E402
from railsync.navigation import Navigator  # noqa: E402

TEST_BASE_URL = "http://railsync.test"

USER_PAYLOAD = {
    "id": "u-1",
    "email": "ada@example.com",
    "name": "Ada Lovelace",
    "picture": "https://example.com/ada.png",
    "provider": "google",
}


@pytest.fixture(autouse=True)
def _fresh_client_config(monkeypatch: pytest.MonkeyPatch):
    """Config is lru_cached; make sure env changes in one test don't leak into the next."""
    for name in (
        "RAILSYNC_API_URL",
        "VITE_API_URL",
        "RAILSYNC_TOKEN_FILE",
        "RAILSYNC_HTTP_TIMEOUT_SECONDS",
        "RAILSYNC_LOGIN_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    load_client_config.cache_clear()
    yield
    load_client_config.cache_clear()


@pytest.fixture
def navigator() -> Navigator:
    return Navigator()


@pytest.fixture
def carrier() -> CredentialCarrier:
    return CredentialCarrier(MemoryStorage())


@pytest.fixture
def make_gateway(carrier: CredentialCarrier, navigator: Navigator) -> Callable[..., HttpGateway]:
    """Build a gateway whose backend is a `httpx.MockTransport` handler (sync or async)."""

    def _make(handler: Callable, *, login_path: str = "/login", base: Optional[str] = None) -> HttpGateway:
        return HttpGateway(
            carrier=carrier,
            navigator=navigator,
            base_url=base or TEST_BASE_URL,
            login_path=login_path,
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def user_payload() -> dict:
    return dict(USER_PAYLOAD)
