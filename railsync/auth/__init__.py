"""
Client-side session handling for the RailSync UI.

Design goals:
- Provider-agnostic OAuth login (Google, Microsoft, Discord).
- One shared HTTP client that attaches the bearer credential and handles 401s in one place.
- A single session store per application scope; everything else reads it through `use_session()`.
"""
