from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from onboarding.application.registration_session import RegistrationOrchestrator
from onboarding.application.signup import SignupController
from onboarding.application.username_validator import (
    UsernameAvailabilityValidator,
    VerdictCallback,
)
from onboarding.domain.entities import CurrentUser
from onboarding.domain.ports.challenge_port import ChallengePort
from onboarding.domain.ports.notification_port import NotificationPort
from onboarding.domain.ports.username_port import UsernameCheckPort
from onboarding.infrastructure.http.challenge_client import HttpChallengeClient
from onboarding.infrastructure.http.client import build_http_client
from onboarding.infrastructure.http.username_client import HttpUsernameChecker
from onboarding.infrastructure.notifications.log_notifier import LoggingNotifier
from onboarding.logging import setup_logging
from onboarding.settings import Settings, get_settings

logger = logging.getLogger("onboarding.application.context")


class RegistrationContext:
    """
    Everything a sign-up needs, built once and passed around explicitly.

    Holds the collaborators and the user signed up in this context. Build it
    with `open_registration_context()` so the HTTP client gets closed.
    """

    def __init__(
        self,
        settings: Settings,
        challenge: ChallengePort,
        username_checker: UsernameCheckPort,
        notifier: NotificationPort,
    ) -> None:
        self.settings = settings
        self.challenge = challenge
        self.username_checker = username_checker
        self.notifier = notifier
        self._current_user: CurrentUser | None = None
        self._validators: list[UsernameAvailabilityValidator] = []

    @property
    def current_user(self) -> CurrentUser | None:
        return self._current_user

    def set_current_user(self, user: CurrentUser) -> None:
        self._current_user = user

    def sign_out(self) -> None:
        self._current_user = None

    def new_orchestrator(self) -> RegistrationOrchestrator:
        return RegistrationOrchestrator(
            self.challenge, notifier=self.notifier, settings=self.settings
        )

    def new_username_validator(
        self, on_verdict: Optional[VerdictCallback] = None
    ) -> UsernameAvailabilityValidator:
        validator = UsernameAvailabilityValidator(
            self.username_checker, on_verdict=on_verdict, settings=self.settings
        )
        self._validators.append(validator)
        return validator

    def new_signup_controller(self) -> SignupController:
        return SignupController(
            self.new_orchestrator(),
            self.notifier,
            on_registered=self.set_current_user,
        )

    async def aclose(self) -> None:
        validators, self._validators = self._validators, []
        for validator in validators:
            await validator.aclose()
        self._current_user = None


@asynccontextmanager
async def open_registration_context(
    settings: Settings | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    notifier: NotificationPort | None = None,
    configure_logging: bool = False,
) -> AsyncIterator[RegistrationContext]:
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level)

    owns_client = client is None
    http = client or build_http_client(settings)

    # Adapters share the client; only this function closes it.
    challenge = HttpChallengeClient(
        settings.api_base_url,
        client=http,
        init_path=settings.register_init_path,
        verify_path=settings.register_verify_path,
        finalize_path=settings.register_finalize_path,
    )
    checker = HttpUsernameChecker(
        settings.api_base_url,
        client=http,
        check_path=settings.username_check_path,
    )
    ctx = RegistrationContext(
        settings=settings,
        challenge=challenge,
        username_checker=checker,
        notifier=notifier or LoggingNotifier(),
    )
    logger.debug("registration context opened", extra={"env": settings.app_env})
    try:
        yield ctx
    finally:
        await ctx.aclose()
        await challenge.aclose()
        await checker.aclose()
        if owns_client:
            await http.aclose()
        logger.debug("registration context closed")
