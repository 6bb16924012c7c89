"""
Fetch a backend resource through the shared gateway and track its progress.

`ResourceFetch` exposes a `{data, loading, error}` snapshot that starts out loading and
settles once. Closing it cancels the request task; a cancelled fetch leaves the snapshot
as it was.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

import httpx

from railsync.auth.gateway import HttpGateway, json_or_none

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNEXPECTED_ERROR = "An unexpected error occurred"


@dataclass(frozen=True)
class FetchState(Generic[T]):
    data: Optional[T] = None
    loading: bool = True
    error: Optional[httpx.HTTPError] = None


class ResourceFetch(Generic[T]):
    def __init__(self, gateway: HttpGateway, url: str, **request_kwargs: Any) -> None:
        self._gateway = gateway
        self.url = url
        self._request_kwargs = request_kwargs
        self.state: FetchState[T] = FetchState()
        self._task: Optional[asyncio.Task] = None

    def start(self) -> "ResourceFetch[T]":
        self._ensure_task()
        return self

    def _ensure_task(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def _run(self) -> None:
        try:
            r = await self._gateway.get(self.url, **self._request_kwargs)
            self.state = FetchState(data=json_or_none(r), loading=False, error=None)
        except httpx.HTTPError as e:
            self.state = FetchState(data=None, loading=False, error=e)
        except Exception as e:
            logger.error(f"Fetching {self.url} failed: {e}")
            self.state = FetchState(data=None, loading=False, error=httpx.HTTPError(UNEXPECTED_ERROR))

    async def wait(self) -> FetchState[T]:
        task = self._ensure_task()
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
        return self.state

    def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def __aenter__(self) -> "ResourceFetch[T]":
        return self.start()

    async def __aexit__(self, *exc: Any) -> None:
        self.close()


async def fetch_resource(gateway: HttpGateway, url: str, **request_kwargs: Any) -> FetchState[Any]:
    """One-shot fetch: start, wait, return the settled snapshot."""
    return await ResourceFetch(gateway, url, **request_kwargs).wait()
