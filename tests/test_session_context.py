from __future__ import annotations

import asyncio

import httpx
import pytest

from railsync.auth.context import SessionHandle, SessionScopeError, session_scope, use_session
from railsync.auth.store import SessionStore


def test_use_session_outside_scope_fails_loudly() -> None:
    with pytest.raises(SessionScopeError, match="within a session scope"):
        use_session()


@pytest.mark.asyncio
async def test_use_session_returns_live_store(make_gateway, user_payload) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=user_payload)

    async with SessionStore(make_gateway(handler)) as store:
        with session_scope(store):
            session = use_session()
            assert isinstance(session, SessionHandle)
            assert session.state is store.state
            assert session.is_loading is True
            await store.wait_settled()
            # Same handle, new state: callers see the live value.
            assert session.is_authenticated is True
            assert session.user is not None and session.user.name == "Ada Lovelace"
            assert callable(session.login) and callable(session.logout) and callable(session.refresh_token)

    with pytest.raises(SessionScopeError):
        use_session()


@pytest.mark.asyncio
async def test_scopes_nest_and_restore(make_gateway) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200)

    gw = make_gateway(handler)
    outer, inner = SessionStore(gw), SessionStore(gw)
    with session_scope(outer):
        with session_scope(inner):
            assert use_session().state is inner.state
        assert use_session().state is outer.state
    await gw.aclose()


@pytest.mark.asyncio
async def test_scope_is_visible_to_child_tasks(make_gateway) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200)

    gw = make_gateway(handler)
    store = SessionStore(gw)

    async def child() -> SessionHandle:
        return use_session()

    with session_scope(store):
        assert (await asyncio.create_task(child())).state is store.state
    await gw.aclose()


@pytest.mark.asyncio
async def test_session_handle_does_not_expose_lifecycle(make_gateway, user_payload) -> None:
    """Consumers can read and use the session, but can not unmount or re-check it."""
    responses = [httpx.Response(200), httpx.Response(200, json=user_payload)]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    async with SessionStore(make_gateway(handler)) as store:
        await store.wait_settled()
        with session_scope(store):
            session = use_session()
            for name in ("mount", "unmount", "check_session", "wait_settled"):
                assert not hasattr(session, name)
            with pytest.raises(AttributeError):
                session.unmount()  # type: ignore[attr-defined]

            await session.refresh_token()

    assert store.is_authenticated is True
    assert session.is_authenticated is True
    assert session.is_loading is False
