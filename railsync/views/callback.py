from __future__ import annotations

import logging

from railsync.auth.context import use_session
from railsync.navigation import Navigator

logger = logging.getLogger(__name__)

HOME_PATH = "/"


async def handle_callback(navigator: Navigator, *, login_path: str = "/login") -> bool:
    """
    Finish sign-in after the OAuth provider redirects back to us.

    The backend has set the session by now; refresh picks up the user. Returns True and
    goes home on success, or sends the user back to the login page on any failure.
    """
    session = use_session()
    try:
        await session.refresh_token()
    except Exception as e:
        logger.info(f"Sign-in callback could not refresh the session: {e}")
        navigator.navigate(login_path)
        return False
    navigator.navigate(HOME_PATH)
    return True
