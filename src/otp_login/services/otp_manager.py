"""OTP lifecycle manager — generation, expiry, attempts and lockout.

State per identity is never held here; it is inferred on every call from
the stored record and the current time:

    Absent ──generate──▶ Active ──validate──▶ Verified | Expired | Locked

``generate`` re-enters Active from any state, fully resetting the record.
Expiry is detected lazily by ``validate``; ``remaining_seconds`` only
reads.
"""

from __future__ import annotations

import logging
import random

from otp_login.config import Settings, settings as default_settings
from otp_login.models.otp import FailureReason, OtpRecord, ValidationResult
from otp_login.services.analytics import Analytics
from otp_login.services.clock import Clock, system_clock
from otp_login.storage.otp_store import OtpStore

logger = logging.getLogger(__name__)


class OtpManager:
    """Sole writer of an :class:`OtpStore`.

    Identities are used literally; callers normalise emails beforehand.
    """

    def __init__(
        self,
        store: OtpStore,
        analytics: Analytics,
        settings: Settings | None = None,
        clock: Clock = system_clock,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._analytics = analytics
        self._settings = settings or default_settings
        self._clock = clock
        self._rng = rng or random.Random()

    @property
    def max_attempts(self) -> int:
        return self._settings.max_attempts

    # ── Operations ───────────────────────────────────────

    def generate(self, identity: str) -> None:
        """Issue a fresh code for *identity*, replacing any previous one.

        The code is not returned; it only reaches the user out-of-band.
        """
        code = self._draw_code()
        now = self._clock.now_ms()
        self._store.put(
            identity,
            OtpRecord(
                code=code,
                created_at=now,
                expires_at=now + self._settings.otp_expiry_ms,
                attempts=0,
            ),
        )

        if self._settings.is_development:
            logger.info("[DEV] OTP for %s: %s", identity, code)

        self._analytics.log_otp_generated(identity, code)

    def validate(self, identity: str, candidate: str) -> ValidationResult:
        """Check *candidate* against the live code for *identity*.

        An attempt is consumed before the comparison, right or wrong.
        """
        record = self._store.get(identity)
        if record is None:
            self._analytics.log_otp_failure(identity, FailureReason.NO_OTP.value)
            return ValidationResult.failed(FailureReason.NO_OTP)

        if self._clock.now_ms() > record.expires_at:
            self._store.delete(identity)
            self._analytics.log_otp_failure(identity, FailureReason.EXPIRED.value)
            return ValidationResult.failed(FailureReason.EXPIRED)

        if record.attempts >= self._settings.max_attempts:
            self._analytics.log_otp_failure(
                identity, FailureReason.MAX_ATTEMPTS.value, record.attempts
            )
            return ValidationResult.failed(FailureReason.MAX_ATTEMPTS)

        record.attempts += 1
        self._store.put(identity, record)

        if candidate == record.code:
            self._analytics.log_otp_success(identity)
            self._store.delete(identity)
            return ValidationResult.ok()

        remaining = self._settings.max_attempts - record.attempts
        self._analytics.log_otp_failure(
            identity, FailureReason.WRONG_CODE.value, record.attempts
        )
        return ValidationResult.failed(FailureReason.WRONG_CODE, remaining=remaining)

    def invalidate(self, identity: str) -> None:
        """Drop any code issued to *identity*. Idempotent."""
        self._store.delete(identity)

    def resend(self, identity: str) -> None:
        """Invalidate the old code, then issue a new one."""
        self.invalidate(identity)
        self.generate(identity)

    def remaining_seconds(self, identity: str) -> int:
        """Whole seconds left before expiry, rounded up; 0 if no code."""
        record = self._store.get(identity)
        if record is None:
            return 0
        left_ms = record.expires_at - self._clock.now_ms()
        return max(0, -(-left_ms // 1000))

    # ── Private helpers ──────────────────────────────────

    def _draw_code(self) -> str:
        length = self._settings.otp_length
        return str(self._rng.randint(10 ** (length - 1), 10**length - 1))
