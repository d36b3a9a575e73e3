from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DriverName = Literal["totp", "oauth", "magic-link"]


class InitChallengeIn(BaseModel):
    driver: DriverName
    email: str | None = Field(None, description="Email to challenge", max_length=255)
    phone: str | None = Field(None, description="10-digit mobile number")


class VerifyChallengeIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    driver: DriverName
    pending_id: str = Field(..., alias="pendingId", min_length=1)
    code: str = Field(..., min_length=1, description="Zero-padded numeric code")


class FinalizeRegistrationIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    driver: DriverName
    pending_id: str = Field(..., alias="pendingId", min_length=1)
    email: str | None = None
    username: str = Field(..., min_length=1)
    first_name: str = ""
    last_name: str = ""
    password: str
    confirm_password: str
    additional: dict[str, Any] = Field(default_factory=dict)


class UsernameCheckIn(BaseModel):
    username: str = Field(..., min_length=1)
