from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from onboarding.domain.errors import ChallengeRejected, ConflictRecovered, TransportError
from onboarding.domain.ports.challenge_port import ChallengePort
from onboarding.infrastructure.http.client import error_message
from onboarding.schemas.requests import (
    FinalizeRegistrationIn,
    InitChallengeIn,
    VerifyChallengeIn,
)
from onboarding.schemas.responses import ErrorOut, InitChallengeOut

logger = logging.getLogger("onboarding.infrastructure.http.challenge_client")


def _path(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


class HttpChallengeClient(ChallengePort):
    def __init__(
        self,
        base_url: str = "",
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        init_path: str = "/auth/register",
        verify_path: str = "/auth/register/verify",
        finalize_path: str = "/auth/register/finalize",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._init_path = _path(init_path)
        self._verify_path = _path(verify_path)
        self._finalize_path = _path(finalize_path)
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def init(self, request: InitChallengeIn) -> str:
        resp = await self._post(
            self._init_path,
            request.model_dump(by_alias=True, exclude_none=True),
            params={"driver": request.driver},
        )
        if resp.status_code == 409:
            body = self._error_body(resp)
            if body.data is not None and body.data.pending_id:
                logger.info(
                    "registration already pending",
                    extra={"pending_id": body.data.pending_id},
                )
                raise ConflictRecovered(body.data.pending_id, body.text())
            raise ChallengeRejected(
                body.text() or "Registration already in progress", status_code=409
            )
        self._raise_for_status(resp, "Could not send the code")

        try:
            out = InitChallengeOut.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as e:
            raise TransportError(
                "Malformed init response", status_code=resp.status_code
            ) from e
        if not out.pending_id:
            raise TransportError(
                "Missing pendingId in response", status_code=resp.status_code
            )
        return out.pending_id

    async def verify(self, request: VerifyChallengeIn) -> None:
        resp = await self._post(
            self._verify_path, request.model_dump(by_alias=True, exclude_none=True)
        )
        self._raise_for_status(resp, "Invalid OTP")

    async def finalize(self, request: FinalizeRegistrationIn) -> None:
        resp = await self._post(
            self._finalize_path, request.model_dump(by_alias=True, exclude_none=True)
        )
        self._raise_for_status(resp, "Could not create account")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(
        self,
        path: str,
        payload: dict[str, Any],
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            return await self._client.post(url, json=payload, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"Identity service HTTP error: {e}") from e

    @staticmethod
    def _error_body(resp: httpx.Response) -> ErrorOut:
        try:
            return ErrorOut.model_validate(resp.json())
        except (ValueError, PydanticValidationError):
            return ErrorOut()

    @staticmethod
    def _raise_for_status(resp: httpx.Response, default: str) -> None:
        if 200 <= resp.status_code < 300:
            return
        message = error_message(resp, default)
        if 400 <= resp.status_code < 500:
            raise ChallengeRejected(message, status_code=resp.status_code)
        raise TransportError(
            f"Identity service responded {resp.status_code}: {message}",
            status_code=resp.status_code,
        )
