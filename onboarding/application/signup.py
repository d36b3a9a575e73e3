from __future__ import annotations

import logging
from typing import Any, Callable

import onboarding.domain.services as domain_services
from onboarding.application.registration_session import RegistrationOrchestrator
from onboarding.domain.entities import Contact, CurrentUser, Driver, ProfileInput
from onboarding.domain.flow import FlowMachine, create
from onboarding.domain.flows import Role, SignupEvent, SignupState, signup_config
from onboarding.domain.ports.notification_port import NotificationPort

logger = logging.getLogger("onboarding.application.signup")


class SignupController:
    """
    Phone sign-up screen logic: runs the orchestrator and moves the flow.

    Orchestrator errors propagate unchanged and leave the flow where it
    was; the orchestrator has already reported them to the notifier.
    """

    def __init__(
        self,
        orchestrator: RegistrationOrchestrator,
        notifier: NotificationPort,
        *,
        flow: FlowMachine[SignupState, SignupEvent] | None = None,
        on_registered: Callable[[CurrentUser], None] | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.notifier = notifier
        self.flow = flow or create(signup_config())
        self.role: Role | None = None
        self._on_registered = on_registered

    async def send_otp(self, phone: str) -> str:
        pending_id = await self.orchestrator.initiate(Driver.TOTP, Contact(phone=phone))
        self.notifier.success(
            "OTP Sent", "We've sent a 6-digit OTP to your mobile number"
        )
        self.flow.send(SignupEvent.OTP_SENT)
        return pending_id

    async def resend_otp(self) -> str:
        pending_id = await self.orchestrator.resend()
        self.notifier.success("OTP Sent", "We've sent a new OTP to your mobile number")
        return pending_id

    async def verify_otp(self, code: str) -> None:
        await self.orchestrator.verify(code)
        self.notifier.success("Phone Verified", "Choose your role to continue")
        self.flow.send(SignupEvent.OTP_VERIFIED)

    def change_number(self) -> None:
        self.orchestrator.reset()
        self.flow.send(SignupEvent.BACK)

    def select_role(self, role: Role) -> None:
        self.role = role
        target = SignupState.INVESTOR if role == Role.INVESTOR else SignupState.EXPERT
        self.flow.go(target)

    def role_back(self) -> None:
        self.role = None
        self.flow.go(SignupState.ROLE)

    async def complete(
        self,
        *,
        full_name: str = "",
        username: str | None = None,
        email: str | None = None,
        password: str | None = None,
        confirm_password: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> CurrentUser:
        session = self.orchestrator.session
        first_name, last_name = domain_services.split_full_name(full_name)
        role = self.role.value if self.role is not None else None
        additional: dict[str, Any] = {
            "role": role,
            "phone": session.contact.phone,
            "pendingId": session.pending_id,
        }
        if role is not None:
            additional[role] = dict(details or {})

        registered = await self.orchestrator.finalize(
            ProfileInput(
                username=username,
                first_name=first_name,
                last_name=last_name,
                email=email,
                password=password,
                confirm_password=confirm_password,
                additional=additional,
            )
        )
        user = CurrentUser(
            username=registered,
            email=email,
            phone=session.contact.phone,
            role=role,
        )
        logger.info("signup complete", extra={"username": registered, "role": role})
        self.notifier.success("Welcome!", "Your account is ready.")
        if self._on_registered is not None:
            self._on_registered(user)
        return user
