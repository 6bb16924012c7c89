#!/usr/bin/env python3
"""
RailSync session client.
Drives the client-side session flows (check, login, OAuth callback, logout) against a backend.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stderr
)


def _user_summary(user: Any) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return user.model_dump(mode="json")


async def run_command(args: argparse.Namespace, *, transport: Any = None) -> int:
    """
    Run one CLI command inside a booted client app. Returns the process exit code.

    `transport` overrides the HTTP transport (an `httpx.AsyncBaseTransport`); tests use it
    to point the client at an in-process backend.
    """
    from railsync.app import open_app
    from railsync.auth.config import load_client_config
    from railsync.auth.storage import carrier_from_config

    cfg = load_client_config()
    carrier = carrier_from_config(cfg)

    # Token edits don't need a session.
    if args.set_token:
        carrier.set(args.set_token)
        print("Credential stored")
        return 0
    if args.clear_token:
        carrier.clear()
        print("Credential cleared")
        return 0

    async with open_app(cfg=cfg, carrier=carrier, transport=transport) as app:
        state = await app.store.wait_settled()

        if args.login:
            await app.store.login(args.login)
            if app.store.error:
                print(f"❌ {app.store.error}", file=sys.stderr)
                return 1
            print(f"Open this URL to continue sign-in:\n{app.navigator.href}")
            return 0

        if args.callback:
            from railsync.views.callback import handle_callback

            ok = await handle_callback(app.navigator, login_path=cfg.login_path)
            print(json.dumps({"ok": ok, "next": app.navigator.pathname, "user": _user_summary(app.store.user)}))
            return 0 if ok else 1

        if args.logout:
            from railsync.views.logout import handle_logout

            await handle_logout(app.navigator)
            if app.store.error:
                print(f"❌ {app.store.error}", file=sys.stderr)
                return 1
            print("Signed out")
            return 0

        # --status (default)
        print(
            json.dumps(
                {
                    "authenticated": state.is_authenticated,
                    "user": _user_summary(state.user),
                    "redirect": app.navigator.href,
                },
                indent=2,
            )
        )
        return 0 if state.is_authenticated else 1


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="RailSync session client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Who am I?
  python main.py --status

  # Start a Google sign-in (prints the provider URL)
  python main.py --login google

  # After the provider redirected back: pick up the session
  python main.py --callback

  # Sign out
  python main.py --logout
        """,
    )
    parser.add_argument("--status", action="store_true", help="Check the current session (default)")
    parser.add_argument(
        "--login", metavar="PROVIDER", choices=["google", "microsoft", "discord"], help="Begin OAuth login"
    )
    parser.add_argument("--callback", action="store_true", help="Complete sign-in after the provider redirect")
    parser.add_argument("--logout", action="store_true", help="End the session")
    parser.add_argument("--set-token", metavar="TOKEN", help="Store a bearer credential in the configured slot")
    parser.add_argument("--clear-token", action="store_true", help="Remove the stored bearer credential")

    args = parser.parse_args()

    try:
        sys.exit(asyncio.run(run_command(args)))
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        raise


if __name__ == "__main__":
    main()
