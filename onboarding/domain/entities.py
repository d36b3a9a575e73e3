from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from onboarding.domain.errors import StateError


class Driver(str, Enum):
    TOTP = "totp"
    OAUTH = "oauth"
    MAGIC_LINK = "magic-link"


class SessionStatus(str, Enum):
    EMPTY = "Empty"
    INITIATED = "Initiated"
    VERIFIED = "Verified"
    FINALIZED = "Finalized"


class Availability(str, Enum):
    PENDING = "Pending"
    AVAILABLE = "Available"
    TAKEN = "Taken"
    INDETERMINATE = "Indeterminate"


class ValidatorState(str, Enum):
    IDLE = "Idle"
    TOO_SHORT = "TooShort"
    CHECKING = "Checking"
    AVAILABLE = "Available"
    TAKEN = "Taken"
    INDETERMINATE = "Indeterminate"


@dataclass(frozen=True)
class Contact:
    email: str | None = None
    phone: str | None = None


@dataclass
class RegistrationSession:
    driver: Driver = Driver.TOTP
    contact: Contact = field(default_factory=Contact)
    pending_id: str | None = None
    status: SessionStatus = SessionStatus.EMPTY

    def bind_driver(self, driver: Driver) -> None:
        if self.pending_id is not None and driver != self.driver:
            raise StateError(
                f"driver is fixed to {self.driver.value} for this registration"
            )
        self.driver = driver

    def mark_initiated(self, pending_id: str) -> None:
        if self.status == SessionStatus.FINALIZED:
            raise StateError("registration already finalized")
        self.pending_id = pending_id
        self.status = SessionStatus.INITIATED

    def mark_verified(self) -> None:
        if not self.pending_id:
            raise StateError("missing registration context")
        if self.status != SessionStatus.INITIATED:
            raise StateError(f"cannot verify from status {self.status.value}")
        self.status = SessionStatus.VERIFIED

    def mark_finalized(self) -> None:
        if not self.pending_id:
            raise StateError("missing registration context")
        self.status = SessionStatus.FINALIZED


@dataclass
class ValidationQuery:
    query: str
    fired_at: int
    result: Availability = Availability.PENDING


@dataclass(frozen=True)
class AvailabilityVerdict:
    query: str
    state: ValidatorState
    message: str | None = None
    suggestion: str | None = None


@dataclass
class ProfileInput:
    username: str | None = None
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    password: str | None = None
    confirm_password: str | None = None
    additional: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CurrentUser:
    username: str
    email: str | None = None
    phone: str | None = None
    role: str | None = None
