"""
Session scope.

The application root installs its store with `session_scope(store)`; everything below
reads it through `use_session()`. There is no module-level fallback store.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, Optional

from railsync.auth.models import SessionState, User
from railsync.auth.store import Listener, SessionStore

_current_store: ContextVar[Optional[SessionStore]] = ContextVar("railsync_session_store", default=None)


class SessionScopeError(RuntimeError):
    """`use_session()` was called with no session store installed above it."""


class SessionHandle:
    """
    What consumers get from `use_session()`: the live session state and the three session
    operations. Mounting and unmounting stay with whoever owns the store.
    """

    __slots__ = ("_store",)

    def __init__(self, store: SessionStore) -> None:
        self._store = store

    @property
    def state(self) -> SessionState:
        return self._store.state

    @property
    def user(self) -> Optional[User]:
        return self._store.user

    @property
    def is_authenticated(self) -> bool:
        return self._store.is_authenticated

    @property
    def is_loading(self) -> bool:
        return self._store.is_loading

    @property
    def error(self) -> Optional[str]:
        return self._store.error

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._store.subscribe(listener)

    async def login(self, provider: str) -> None:
        await self._store.login(provider)

    async def logout(self) -> None:
        await self._store.logout()

    async def refresh_token(self) -> None:
        await self._store.refresh_token()


@contextmanager
def session_scope(store: SessionStore) -> Iterator[SessionStore]:
    token = _current_store.set(store)
    try:
        yield store
    finally:
        _current_store.reset(token)


def use_session() -> SessionHandle:
    store = _current_store.get()
    if store is None:
        raise SessionScopeError("use_session must be used within a session scope")
    return SessionHandle(store)
