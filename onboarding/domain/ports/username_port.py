from typing import Protocol

from onboarding.schemas.responses import UsernameCheckOut


class UsernameCheckPort(Protocol):
    async def check(self, username: str) -> UsernameCheckOut:
        """Ask the backend whether `username` is free."""
