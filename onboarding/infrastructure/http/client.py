from __future__ import annotations

import httpx

from onboarding.settings import Settings


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """AsyncClient for the identity service, owned by the caller."""
    return httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        headers={"Accept": "application/json"},
    )


def error_message(resp: httpx.Response, default: str) -> str:
    """Best-effort human message from an error body."""
    try:
        body = resp.json()
    except ValueError:
        text = resp.text[:200]
        return text or default
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return default
