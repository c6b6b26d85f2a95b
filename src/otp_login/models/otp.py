"""OTP record and validation result value objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field, RootModel


class OtpRecord(BaseModel):
    """The single live code issued to one identity.

    Timestamps are epoch milliseconds.
    """

    code: str
    created_at: int
    expires_at: int
    attempts: int = Field(0, ge=0)


class OtpStoreData(RootModel[dict[str, OtpRecord]]):
    """Serialised shape of the whole store: ``identity → OtpRecord``."""

    root: dict[str, OtpRecord] = Field(default_factory=dict)


class FailureReason(str, Enum):
    NO_OTP = "no_otp"
    EXPIRED = "expired"
    MAX_ATTEMPTS = "max_attempts"
    WRONG_CODE = "wrong_code"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation attempt.

    ``reason`` is set on every failure; ``remaining`` only accompanies
    ``WRONG_CODE``.
    """

    success: bool
    reason: FailureReason | None = None
    remaining: int | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(success=True)

    @classmethod
    def failed(
        cls, reason: FailureReason, remaining: int | None = None
    ) -> ValidationResult:
        return cls(success=False, reason=reason, remaining=remaining)

    def as_dict(self) -> dict:
        """Plain dict with unset optional fields dropped."""
        data: dict = {"success": self.success}
        if self.reason is not None:
            data["reason"] = self.reason.value
        if self.remaining is not None:
            data["remaining"] = self.remaining
        return data
