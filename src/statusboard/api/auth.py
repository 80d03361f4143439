"""API key authentication dependency for FastAPI."""

from __future__ import annotations

import hmac

from fastapi import HTTPException, Request


def _presented_key(request: Request) -> str:
    """Key from X-API-Key, falling back to an ``Authorization: Bearer`` token."""
    key = request.headers.get("X-API-Key", "")
    if key:
        return key
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer":
        return token.strip()
    return ""


async def require_api_key(request: Request) -> None:
    """Guards the endpoints that start checks or change the dashboard.

    Auth is disabled when no key is configured.
    """
    expected = request.app.state.config.auth.api_key
    if not expected:
        return
    if not hmac.compare_digest(_presented_key(request).encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
