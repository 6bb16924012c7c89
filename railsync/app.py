"""Application root: wires navigator, gateway and session store, and opens the session scope."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from railsync.auth.config import ClientConfig, load_client_config
from railsync.auth.context import session_scope
from railsync.auth.gateway import HttpGateway
from railsync.auth.storage import CredentialCarrier
from railsync.auth.store import SessionStore
from railsync.navigation import Navigator


@dataclass
class ClientApp:
    cfg: ClientConfig
    navigator: Navigator
    gateway: HttpGateway
    store: SessionStore


@asynccontextmanager
async def open_app(
    *,
    cfg: Optional[ClientConfig] = None,
    carrier: Optional[CredentialCarrier] = None,
    navigator: Optional[Navigator] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[ClientApp]:
    """
    Boot the client: mount the session store (which starts the session check) and install
    it as the current session scope. Unmounts and closes the HTTP client on exit.
    """
    cfg = cfg or load_client_config()
    navigator = navigator or Navigator()
    async with HttpGateway.from_config(navigator, cfg=cfg, carrier=carrier, transport=transport) as gateway:
        async with SessionStore(gateway) as store:
            with session_scope(store):
                yield ClientApp(cfg=cfg, navigator=navigator, gateway=gateway, store=store)
