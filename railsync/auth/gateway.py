"""
Shared HTTP client for every backend call.

All outbound requests go through one `httpx.AsyncClient` with two event hooks:
- request: attach `Authorization: Bearer <token>` when a credential is stored;
- response: on 401, clear the credential and hard-redirect to the login page.

The 401 handling is a side effect only. Callers still get the `httpx.HTTPStatusError`
and decide what to do with it.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from railsync.auth.config import ClientConfig, load_client_config
from railsync.auth.storage import CredentialCarrier, carrier_from_config
from railsync.navigation import Navigator

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401


class HttpGateway:
    def __init__(
        self,
        *,
        carrier: CredentialCarrier,
        navigator: Navigator,
        base_url: str,
        timeout: float = 10.0,
        login_path: str = "/login",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.carrier = carrier
        self.navigator = navigator
        self.login_path = login_path
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
            event_hooks={"request": [self._attach_credential], "response": [self._handle_unauthorized]},
        )

    @classmethod
    def from_config(
        cls,
        navigator: Navigator,
        *,
        cfg: Optional[ClientConfig] = None,
        carrier: Optional[CredentialCarrier] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "HttpGateway":
        cfg = cfg or load_client_config()
        return cls(
            carrier=carrier or carrier_from_config(cfg),
            navigator=navigator,
            base_url=cfg.api_url,
            timeout=cfg.http_timeout_seconds,
            login_path=cfg.login_path,
            transport=transport,
        )

    async def _attach_credential(self, request: httpx.Request) -> None:
        token = self.carrier.get()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def _handle_unauthorized(self, response: httpx.Response) -> None:
        if response.status_code != UNAUTHORIZED:
            return
        logger.warning(f"Credential rejected by {response.request.method} {response.request.url.path}; signing out")
        try:
            self.carrier.clear()
        except Exception as e:
            logger.error(f"Could not clear stored credential: {e}")
        self.navigator.assign(self.login_path)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        r = await self._client.request(method, url, **kwargs)
        r.raise_for_status()
        return r

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpGateway":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()


def json_or_none(response: httpx.Response) -> Any:
    """Decode a JSON body, treating an empty body (or JSON null) as None."""
    raw = (response.content or b"").strip()
    if not raw:
        return None
    try:
        return response.json()
    except ValueError:
        logger.warning(f"Non-JSON body from {response.request.url.path} (status={response.status_code})")
        return None
