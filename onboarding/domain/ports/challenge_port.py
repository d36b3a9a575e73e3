from __future__ import annotations

from typing import Protocol

from onboarding.schemas.requests import (
    FinalizeRegistrationIn,
    InitChallengeIn,
    VerifyChallengeIn,
)


class ChallengePort(Protocol):
    async def init(self, request: InitChallengeIn) -> str:
        """
        Start a challenge and return the pending id.

        Raises ConflictRecovered when the contact already has a pending
        registration (carrying that registration's id).
        """

    async def verify(self, request: VerifyChallengeIn) -> None:
        """Submit the code. Raises ChallengeRejected on a wrong/expired code."""

    async def finalize(self, request: FinalizeRegistrationIn) -> None:
        """Create the account for a verified pending registration."""
