"""Request / response models for the OTP HTTP API."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(value: str) -> str:
    """Trim and lower-case *value*; raise ``ValueError`` if it is not an email."""
    email = value.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Please enter a valid email address.")
    return email


class EmailRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_email(value)


class VerifyRequest(EmailRequest):
    code: str = Field(..., pattern=r"^\d+$")


class SessionResponse(BaseModel):
    session_id: str
    authenticated: bool = False
    email: str | None = None


class OtpSentResponse(BaseModel):
    email: str
    expires_in: int


class VerifyResponse(BaseModel):
    success: bool
    reason: str | None = None
    remaining: int | None = None


class RemainingResponse(BaseModel):
    email: str
    remaining_seconds: int
