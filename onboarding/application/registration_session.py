from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import onboarding.domain.services as domain_services
from onboarding.domain.entities import (
    Contact,
    Driver,
    ProfileInput,
    RegistrationSession,
    SessionStatus,
)
from onboarding.domain.errors import (
    ConflictRecovered,
    OnboardingError,
    StateError,
    ValidationError,
)
from onboarding.domain.ports.challenge_port import ChallengePort
from onboarding.domain.ports.notification_port import NotificationPort
from onboarding.schemas.requests import (
    FinalizeRegistrationIn,
    InitChallengeIn,
    VerifyChallengeIn,
)
from onboarding.settings import Settings, get_settings

logger = logging.getLogger("onboarding.application.registration_session")


class RegistrationOrchestrator:
    """
    Drives one registration attempt through init -> verify -> finalize.

    The orchestrator owns its `RegistrationSession`; callers only read it.
    State is written after the network call returns, so a failed call
    leaves the session exactly as it was. Calls are not serialized here:
    the caller must not start a new one while `in_flight` is true.
    """

    def __init__(
        self,
        challenge: ChallengePort,
        *,
        notifier: NotificationPort | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._challenge = challenge
        self._notifier = notifier
        self._settings = settings or get_settings()
        self._session = RegistrationSession()
        self._in_flight = False

    @property
    def session(self) -> RegistrationSession:
        return self._session

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def reset(self) -> None:
        """Drop the current attempt and go back to contact entry."""
        logger.debug(
            "registration session reset",
            extra={"pending_id": self._session.pending_id},
        )
        self._session = RegistrationSession()

    async def initiate(self, driver: Driver, contact: Contact) -> str:
        before = self._session
        try:
            normalized = domain_services.normalize_contact(
                driver, contact, self._settings.phone_digits
            )
            target = self._session_for(driver, normalized)
            request = InitChallengeIn(
                driver=driver.value, email=normalized.email, phone=normalized.phone
            )

            with self._call():
                try:
                    pending_id = await self._challenge.init(request)
                except ConflictRecovered as conflict:
                    logger.info(
                        "adopting pending registration",
                        extra={"pending_id": conflict.pending_id},
                    )
                    pending_id = conflict.pending_id
        except OnboardingError as e:
            self._report("Could not send code", e)
            raise

        if self._session is not before:
            # reset() ran while the call was in flight
            logger.debug("init response for a discarded session ignored")
            return pending_id
        target.mark_initiated(pending_id)
        self._session = target
        return pending_id

    async def resend(self) -> str:
        session = self._session
        if session.contact.email is None and session.contact.phone is None:
            err = StateError("nothing to resend: no contact entered yet")
            self._report("Could not resend code", err)
            raise err
        return await self.initiate(session.driver, session.contact)

    async def verify(self, code: str) -> None:
        session = self._session
        try:
            if session.status != SessionStatus.INITIATED or not session.pending_id:
                raise StateError(
                    "Missing verification context. Please resend OTP."
                    if not session.pending_id
                    else f"cannot verify from status {session.status.value}"
                )
            length = (
                self._settings.totp_code_length
                if session.driver == Driver.TOTP
                else None
            )
            normalized = domain_services.normalize_code(session.driver, code, length)
            request = VerifyChallengeIn(
                driver=session.driver.value,
                pending_id=session.pending_id,
                code=normalized,
            )
            with self._call():
                await self._challenge.verify(request)
        except OnboardingError as e:
            self._report("Invalid OTP", e)
            raise

        session.mark_verified()

    async def finalize(self, profile: ProfileInput) -> str:
        """
        Create the account. Returns the username that was registered.

        Only a pending id is required: a retry after a failed finalize does
        not need the local status to read `Verified`.
        """
        session = self._session
        try:
            if session.status == SessionStatus.FINALIZED:
                raise StateError("registration already finalized")
            if not session.pending_id:
                raise StateError("missing registration context")
            request = self._finalize_request(session, profile)
            with self._call():
                await self._challenge.finalize(request)
        except OnboardingError as e:
            self._report("Could not create account", e)
            raise

        session.mark_finalized()
        logger.info(
            "registration finalized",
            extra={"pending_id": session.pending_id, "username": request.username},
        )
        return request.username

    def _session_for(self, driver: Driver, contact: Contact) -> RegistrationSession:
        current = self._session
        if current.status != SessionStatus.FINALIZED and current.contact == contact:
            current.bind_driver(driver)
            return current
        return RegistrationSession(driver=driver, contact=contact)

    def _finalize_request(
        self, session: RegistrationSession, profile: ProfileInput
    ) -> FinalizeRegistrationIn:
        email = profile.email or session.contact.email
        if email:
            email = domain_services.normalize_email(email)

        password = profile.password
        if password:
            if len(password) < self._settings.min_password_length:
                raise ValidationError(
                    "Password must be at least "
                    f"{self._settings.min_password_length} characters long",
                    field="password",
                )
            confirm = (
                profile.confirm_password
                if profile.confirm_password is not None
                else password
            )
            if confirm != password:
                raise ValidationError(
                    "Passwords do not match", field="confirm_password"
                )
        else:
            password = domain_services.generate_strong_password(
                self._settings.generated_password_length
            )
            confirm = password

        username = (profile.username or "").strip() or domain_services.default_username(
            email
        )
        return FinalizeRegistrationIn(
            driver=session.driver.value,
            pending_id=session.pending_id,
            email=email,
            username=username,
            first_name=profile.first_name or "",
            last_name=profile.last_name or "",
            password=password,
            confirm_password=confirm,
            additional=dict(profile.additional),
        )

    @contextmanager
    def _call(self) -> Iterator[None]:
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    def _report(self, title: str, err: Exception) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.error(title, str(err))
        except Exception:
            logger.exception("notification sink failed")
