from __future__ import annotations

from typing import Optional

import httpx

from onboarding.domain.errors import TransportError
from onboarding.domain.ports.username_port import UsernameCheckPort
from onboarding.infrastructure.http.client import error_message
from onboarding.schemas.requests import UsernameCheckIn
from onboarding.schemas.responses import UsernameCheckOut


class HttpUsernameChecker(UsernameCheckPort):
    def __init__(
        self,
        base_url: str = "",
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        check_path: str = "/auth/username/check",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._check_path = check_path if check_path.startswith("/") else f"/{check_path}"
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def check(self, username: str) -> UsernameCheckOut:
        url = f"{self._base_url}{self._check_path}"
        payload = UsernameCheckIn(username=username).model_dump()

        try:
            resp = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"Username check HTTP error: {e}") from e

        if not (200 <= resp.status_code < 300):
            raise TransportError(
                error_message(resp, f"Username check responded {resp.status_code}"),
                status_code=resp.status_code,
            )

        try:
            body = resp.json()
        except ValueError:
            body = None
        return UsernameCheckOut.model_validate(body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
