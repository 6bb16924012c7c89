from __future__ import annotations

from railsync.auth.context import use_session
from railsync.navigation import Navigator
from railsync.views.callback import HOME_PATH


async def handle_logout(navigator: Navigator) -> None:
    """Log out and go home. A failed logout is reported through the session's `error`."""
    await use_session().logout()
    navigator.navigate(HOME_PATH)
