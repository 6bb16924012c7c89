"""Auth flows that sit on top of the session store (OAuth callback, logout)."""
