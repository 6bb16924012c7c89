"""
Session store: the single source of truth for who is signed in.

State machine:
    Initializing (is_loading) -> Authenticated | Unauthenticated
Authenticated and Unauthenticated are re-enterable; any operation can move between them.

Concurrency notes:
- Operations may overlap (e.g. a user-triggered logout racing the mount-time check).
  Each one commits a whole `SessionState` snapshot; fields are never updated piecemeal.
- Every operation takes a ticket when it starts. An authentication-changing commit is
  dropped if an operation that started later has already committed, so a slow check
  can not resurrect a session that a logout just ended.
- After `unmount()` nothing is committed. In-flight calls are left to finish; only their
  results are ignored.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Callable, List, Optional

from railsync.auth.gateway import HttpGateway, json_or_none
from railsync.auth.models import SessionState, User, validate_provider
from railsync.navigation import Navigator

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Failed to initiate login"
LOGOUT_FAILED = "Failed to logout"

Listener = Callable[[SessionState], None]


class SessionStore:
    def __init__(self, gateway: HttpGateway, *, navigator: Optional[Navigator] = None) -> None:
        self._gateway = gateway
        self._navigator = navigator or gateway.navigator
        self._state = SessionState.initializing()
        self._alive = False
        self._tickets = itertools.count(1)
        self._last_ticket = 0
        self._listeners: List[Listener] = []
        self._check_task: Optional[asyncio.Task] = None

    # ---- read side ----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def alive(self) -> bool:
        return self._alive

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every committed state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---- lifecycle ----

    def mount(self) -> None:
        """Mark the store live and start the session check. Only the first call starts a check."""
        if self._check_task is not None:
            return
        self._alive = True
        # Ticket taken now, so anything the app does after mounting counts as more recent.
        self._check_task = asyncio.get_running_loop().create_task(self._check(next(self._tickets)))

    def unmount(self) -> None:
        self._alive = False
        self._listeners.clear()

    async def wait_settled(self) -> SessionState:
        """Wait for the mount-time session check to finish."""
        if self._check_task is not None:
            await asyncio.shield(self._check_task)
        return self._state

    async def __aenter__(self) -> "SessionStore":
        self.mount()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.unmount()
        # The check is not aborted; it runs out (result dropped) before the gateway closes.
        if self._check_task is not None and not self._check_task.done():
            await self._check_task

    # ---- commits ----

    def _commit(self, ticket: int, next_state: SessionState) -> bool:
        if not self._alive:
            logger.debug("Session store unmounted; dropping state update")
            return False
        if ticket < self._last_ticket:
            logger.debug(f"Dropping stale session result (ticket={ticket}, latest={self._last_ticket})")
            return False
        self._last_ticket = ticket
        self._publish(next_state)
        return True

    def _commit_error(self, error: Optional[str]) -> None:
        if not self._alive:
            return
        self._publish(self._state.with_error(error))

    def _publish(self, next_state: SessionState) -> None:
        self._state = next_state
        for listener in list(self._listeners):
            try:
                listener(next_state)
            except Exception as e:
                logger.error(f"Session listener failed: {e}")

    async def _fetch_user(self) -> Optional[User]:
        r = await self._gateway.post("/auth/refresh")
        payload = json_or_none(r)
        if not payload:
            return None
        return User.model_validate(payload)

    @staticmethod
    def _settled(user: Optional[User]) -> SessionState:
        return SessionState.authenticated(user) if user is not None else SessionState.unauthenticated()

    # ---- operations ----

    async def check_session(self) -> None:
        """
        Silent session check.

        A missing session is the normal "not logged in" outcome, so failures are logged
        and resolved to Unauthenticated without touching `error`.
        """
        await self._check(next(self._tickets))

    async def _check(self, ticket: int) -> None:
        try:
            user = await self._fetch_user()
        except Exception as e:
            if not self._alive:
                return
            logger.info(f"Session check failed; continuing unauthenticated: {e}")
            self._commit(ticket, SessionState.unauthenticated())
            return
        self._commit(ticket, self._settled(user))

    async def login(self, provider: str) -> None:
        """Ask the backend for the provider's authorization URL and leave the app for it."""
        p = validate_provider(provider)
        try:
            r = await self._gateway.get(f"/auth/{p}/login")
            body = json_or_none(r)
            url = str(body.get("url") or "").strip() if isinstance(body, dict) else ""
            if not url:
                raise ValueError("Login response missing url")
        except Exception as e:
            logger.error(f"Login failed: {e}")
            self._commit_error(LOGIN_FAILED)
            return
        self._navigator.replace(url)

    async def logout(self) -> None:
        """
        End the session on the server.

        On failure the local session is left as-is: the server decides whether the
        session actually ended.
        """
        ticket = next(self._tickets)
        try:
            await self._gateway.post("/auth/logout")
        except Exception as e:
            logger.error(f"Logout failed: {e}")
            self._commit_error(LOGOUT_FAILED)
            return
        self._commit(ticket, SessionState.unauthenticated())

    async def refresh_token(self) -> None:
        """
        Explicit refresh after an OAuth provider redirect.

        Unlike `check_session`, a failed refresh is re-raised so the caller can send the
        user back to the login page.
        """
        ticket = next(self._tickets)
        try:
            user = await self._fetch_user()
        except Exception as e:
            logger.error(f"Token refresh failed: {e}")
            self._commit(ticket, SessionState.unauthenticated())
            raise
        self._commit(ticket, self._settled(user))
