from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class InitChallengeOut(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    pending_id: str | None = Field(
        None, validation_alias=AliasChoices("pendingId", "pending_id", "id")
    )


class ConflictData(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    pending_id: str | None = Field(
        None, validation_alias=AliasChoices("pendingId", "pending_id")
    )


class ErrorOut(BaseModel):
    message: str | None = None
    detail: Any = None
    data: ConflictData | None = None

    def text(self) -> str | None:
        if self.message:
            return self.message
        if isinstance(self.detail, str):
            return self.detail
        return None


class UsernameCheckOut(BaseModel):
    available: bool = True
    suggestion: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _lenient(cls, data: Any) -> Any:
        # Anything without a boolean verdict counts as available.
        if not isinstance(data, dict):
            return {}
        out = {}
        if isinstance(data.get("available"), bool):
            out["available"] = data["available"]
        if isinstance(data.get("suggestion"), str):
            out["suggestion"] = data["suggestion"]
        return out
