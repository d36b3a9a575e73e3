# onboarding/domain/services.py
from __future__ import annotations

import re
import secrets
import string

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from onboarding.domain.entities import Contact, Driver
from onboarding.domain.errors import ValidationError

_NON_DIGITS = re.compile(r"[^0-9]")
_EMAIL = TypeAdapter(EmailStr)

PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*()_+"

# Expected OTP length per driver; drivers without a typed code are absent.
CODE_LENGTHS: dict[Driver, int] = {Driver.TOTP: 6}


def digits_only(raw: str | None) -> str:
    return _NON_DIGITS.sub("", raw or "")


def normalize_phone(raw: str | None, digits: int = 10) -> str:
    phone = digits_only(raw)
    if len(phone) != digits:
        raise ValidationError(
            f"Please enter a valid {digits}-digit mobile number", field="phone"
        )
    return phone


def normalize_email(raw: str | None) -> str:
    candidate = (raw or "").strip()
    if not candidate:
        raise ValidationError("Email is required", field="email")
    try:
        _EMAIL.validate_python(candidate)
    except PydanticValidationError as e:
        raise ValidationError("Invalid email address", field="email") from e
    return candidate


def normalize_contact(driver: Driver, contact: Contact, phone_digits: int = 10) -> Contact:
    """
    Validate and normalize the contact used to start a challenge.

    `totp` needs exactly one of phone/email. The other drivers accept
    whichever is given, but at least one must be present.
    """
    has_email = bool(contact.email and contact.email.strip())
    has_phone = bool(contact.phone and contact.phone.strip())

    if driver == Driver.TOTP and has_email == has_phone:
        raise ValidationError(
            "Provide either a phone number or an email address", field="contact"
        )
    if not (has_email or has_phone):
        raise ValidationError("A phone number or email is required", field="contact")

    return Contact(
        email=normalize_email(contact.email) if has_email else None,
        phone=normalize_phone(contact.phone, phone_digits) if has_phone else None,
    )


def normalize_code(driver: Driver, raw: str | None, length: int | None = None) -> str:
    expected = length if length is not None else CODE_LENGTHS.get(driver)
    if expected is None:
        raise ValidationError(
            f"driver {driver.value} does not use a typed code", field="code"
        )
    code = digits_only(raw)
    if len(code) != expected:
        raise ValidationError(
            f"Please enter a valid {expected}-digit OTP", field="code"
        )
    return code


def normalize_username(raw: str | None) -> str:
    return (raw or "").strip().lower()


def default_username(email: str | None) -> str:
    if email:
        local = email.split("@")[0]
        if local:
            return local
    return "user"


def generate_strong_password(length: int = 16) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def split_full_name(full_name: str | None) -> tuple[str, str]:
    first, _, rest = (full_name or "").strip().partition(" ")
    return first, rest.strip()
