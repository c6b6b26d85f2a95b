"""Session manager — tracks session contexts and their ephemeral OTP state."""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field

from otp_login.config import Settings, settings as default_settings
from otp_login.services.analytics import Analytics
from otp_login.services.clock import Clock, system_clock
from otp_login.services.otp_manager import OtpManager
from otp_login.storage.medium import MemoryStorage, StorageMedium
from otp_login.storage.otp_store import OtpStore

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """One session context: its private storage medium and login state.

    The OTP manager is built on first use over ``storage``; dropping the
    session drops every code issued inside it.
    """

    session_id: str
    analytics: Analytics
    settings: Settings
    clock: Clock = system_clock
    rng: random.Random | None = None
    storage: StorageMedium = field(default_factory=MemoryStorage)
    authenticated_email: str | None = None
    authenticated_at: int | None = None
    _otp_manager: OtpManager | None = field(default=None, init=False, repr=False)

    @property
    def otp_manager(self) -> OtpManager:
        if self._otp_manager is None:
            self._otp_manager = OtpManager(
                store=OtpStore(self.storage, self.settings),
                analytics=self.analytics,
                settings=self.settings,
                clock=self.clock,
                rng=self.rng,
            )
        return self._otp_manager

    @property
    def is_authenticated(self) -> bool:
        return self.authenticated_email is not None

    def mark_authenticated(self, email: str) -> None:
        self.authenticated_email = email
        self.authenticated_at = self.clock.now_ms()

    def duration_seconds(self) -> int:
        """Seconds since authentication, 0 if not signed in."""
        if self.authenticated_at is None:
            return 0
        return max(0, (self.clock.now_ms() - self.authenticated_at) // 1000)


class SessionManager:
    """In-memory registry of session contexts keyed by session id.

    All sessions share one :class:`Analytics` instance; everything else is
    private to the session.
    """

    def __init__(
        self,
        analytics: Analytics | None = None,
        settings: Settings | None = None,
        clock: Clock = system_clock,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._analytics = analytics or Analytics(settings=self._settings)
        self._clock = clock
        self._rng = rng
        self._sessions: dict[str, Session] = {}

    @property
    def analytics(self) -> Analytics:
        return self._analytics

    def open(self) -> Session:
        """Start a new session context with a fresh random id."""
        return self.get(uuid.uuid4().hex, create=True)

    def get(self, session_id: str, create: bool = False) -> Session | None:
        """Retrieve a session, optionally creating it when missing."""
        session = self._sessions.get(session_id)
        if session is None and create:
            logger.info("Creating new session %s", session_id)
            session = Session(
                session_id=session_id,
                analytics=self._analytics,
                settings=self._settings,
                clock=self._clock,
                rng=self._rng,
            )
            self._sessions[session_id] = session
        return session

    def clear(self, session_id: str) -> None:
        """End a session context (e.g. on logout); its OTP state goes with it."""
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.storage.clear()
        logger.info("Session cleared for %s", session_id)

    @property
    def active_count(self) -> int:
        """Number of active sessions (useful for monitoring)."""
        return len(self._sessions)
