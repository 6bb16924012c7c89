"""Route guard: admit, hold, or bounce a navigation based on session state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from railsync.auth.models import SessionState
from railsync.navigation import Navigator

T = TypeVar("T")


@dataclass(frozen=True)
class Loading:
    """Session not settled yet; show a placeholder and do not redirect."""


@dataclass(frozen=True)
class Render(Generic[T]):
    content: T


@dataclass(frozen=True)
class Redirect:
    to: str
    state: Dict[str, Any]
    replace: bool = True


GuardOutcome = Union[Loading, Render, Redirect]


def guard(state: SessionState, location: str, content: T, *, login_path: str = "/login") -> GuardOutcome:
    if state.is_loading:
        return Loading()
    if state.is_authenticated:
        return Render(content)
    return Redirect(to=login_path, state={"from": {"pathname": location}})


def apply_guard(outcome: GuardOutcome, navigator: Navigator) -> Optional[Any]:
    """Carry out a guard outcome. Returns the admitted content, or None."""
    if isinstance(outcome, Render):
        return outcome.content
    if isinstance(outcome, Redirect):
        navigator.navigate(outcome.to, state=outcome.state, replace=outcome.replace)
    return None


def protected(location: str, content: T, navigator: Navigator, *, login_path: str = "/login") -> GuardOutcome:
    """Guard `content` at `location` using the session in scope, performing any redirect."""
    from railsync.auth.context import use_session

    outcome = guard(use_session().state, location, content, login_path=login_path)
    apply_guard(outcome, navigator)
    return outcome
