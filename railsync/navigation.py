"""
Navigation target shared by the whole client.

Two kinds of navigation exist, mirroring a browser:
- full navigations (`assign` / `replace`) leave the application, e.g. to an OAuth provider
  or a hard reload of the login page;
- in-app navigations (`navigate`) change the route and may carry state, e.g. the
  "return to" location attached by the route guard.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Navigation:
    kind: str  # assign|replace|navigate
    target: str
    state: Optional[Dict[str, Any]] = None
    replace: bool = False


@dataclass
class Navigator:
    pathname: str = "/"
    href: Optional[str] = None
    state: Optional[Dict[str, Any]] = None
    history: List[Navigation] = field(default_factory=list)

    def assign(self, url: str) -> None:
        """Full navigation, keeping the current entry in history."""
        self._full("assign", url)

    def replace(self, url: str) -> None:
        """Full navigation replacing the current history entry."""
        self._full("replace", url)

    def _full(self, kind: str, url: str) -> None:
        logger.info(f"Full navigation ({kind}) to {url}")
        self.href = url
        if url.startswith("/"):
            self.pathname = url.split("?", 1)[0]
        self.state = None
        self.history.append(Navigation(kind=kind, target=url))

    def navigate(self, path: str, *, state: Optional[Dict[str, Any]] = None, replace: bool = False) -> None:
        self.pathname = path
        self.state = state
        self.history.append(Navigation(kind="navigate", target=path, state=state, replace=replace))

    @property
    def last(self) -> Optional[Navigation]:
        return self.history[-1] if self.history else None
