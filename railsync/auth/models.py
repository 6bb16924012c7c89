from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict

OAuthProvider = Literal["google", "microsoft", "discord"]
PROVIDERS = get_args(OAuthProvider)


def validate_provider(provider: Any) -> str:
    p = str(provider or "").strip().lower()
    if p not in PROVIDERS:
        raise ValueError(f"Unknown OAuth provider: {provider!r} (expected one of {', '.join(PROVIDERS)})")
    return p


class User(BaseModel):
    """Authenticated user, as returned by `/auth/refresh`."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    email: str
    name: str
    picture: Optional[str] = None
    provider: OAuthProvider


@dataclass(frozen=True)
class SessionState:
    """
    Snapshot of the session.

    Instances are never mutated; the store swaps in a new snapshot on every commit so
    observers can not see a half-applied update.
    """

    user: Optional[User] = None
    is_authenticated: bool = False
    is_loading: bool = True
    error: Optional[str] = None

    @classmethod
    def initializing(cls) -> "SessionState":
        return cls(user=None, is_authenticated=False, is_loading=True, error=None)

    @classmethod
    def authenticated(cls, user: User) -> "SessionState":
        return cls(user=user, is_authenticated=True, is_loading=False, error=None)

    @classmethod
    def unauthenticated(cls) -> "SessionState":
        return cls(user=None, is_authenticated=False, is_loading=False, error=None)

    def with_error(self, error: Optional[str]) -> "SessionState":
        return replace(self, error=error)

    @property
    def consistent(self) -> bool:
        return self.is_loading or self.is_authenticated == (self.user is not None)
