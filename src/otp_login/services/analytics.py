"""Analytics — fire-and-forget event logging for the OTP flow.

Every event is

* logged through the standard logger,
* appended to a bounded debug log persisted in a process-wide storage
  medium (so it outlives individual session contexts), and
* when ``settings.analytics_endpoint`` is set, queued for forwarding in
  a queue capped at ``settings.analytics_queue_size`` (oldest dropped).

None of these steps may fail the caller: persistence and forwarding
errors are logged and dropped.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from datetime import UTC, datetime
from typing import Any

import httpx

from otp_login.config import Settings, settings as default_settings
from otp_login.storage.medium import MemoryStorage, StorageError, StorageMedium

logger = logging.getLogger(__name__)

ANALYTICS_LOG_KEY = "analytics_log"


class AnalyticsEvents:
    OTP_GENERATED = "otp_generated"
    OTP_VALIDATION_SUCCESS = "otp_validation_success"
    OTP_VALIDATION_FAILURE = "otp_validation_failure"
    LOGOUT = "logout"


class Analytics:
    """Observability collaborator used by the OTP manager and HTTP layer."""

    def __init__(
        self,
        medium: StorageMedium | None = None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._medium = medium if medium is not None else MemoryStorage()
        self._transport = transport
        self._pending: deque[dict[str, Any]] = deque(
            maxlen=self._settings.analytics_queue_size
        )

    # ── Generic event sink ───────────────────────────────

    def log_event(self, name: str, params: dict[str, Any] | None = None) -> None:
        """Record *name* with *params*. Never raises."""
        params = dict(params or {})
        logger.info("[Analytics] %s %s", name, params)

        entry = {
            "event": name,
            "params": params,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        if self._settings.analytics_endpoint:
            self._pending.append(entry)
        self._append_to_log(entry)

    # ── OTP / session events ─────────────────────────────

    def log_otp_generated(self, email: str, code: str) -> None:
        """Only the code length is recorded, never the code itself."""
        self.log_event(
            AnalyticsEvents.OTP_GENERATED, {"email": email, "code_length": len(code)}
        )

    def log_otp_success(self, email: str) -> None:
        self.log_event(AnalyticsEvents.OTP_VALIDATION_SUCCESS, {"email": email})

    def log_otp_failure(
        self, email: str, reason: str, attempts: int | None = None
    ) -> None:
        params: dict[str, Any] = {"email": email, "reason": reason}
        if attempts is not None:
            params["attempts"] = attempts
        self.log_event(AnalyticsEvents.OTP_VALIDATION_FAILURE, params)

    def log_logout(self, email: str, session_duration: int) -> None:
        self.log_event(
            AnalyticsEvents.LOGOUT,
            {"email": email, "session_duration_seconds": session_duration},
        )

    # ── Debug log ────────────────────────────────────────

    def recent_events(self) -> list[dict[str, Any]]:
        """Return the persisted debug log, oldest first."""
        try:
            raw = self._medium.get_item(ANALYTICS_LOG_KEY)
            log = json.loads(raw) if raw else []
        except (StorageError, OSError, ValueError):
            return []
        return log if isinstance(log, list) else []

    def _append_to_log(self, entry: dict[str, Any]) -> None:
        limit = self._settings.analytics_log_size
        try:
            log = self.recent_events()
            log.append(entry)
            log = log[-limit:] if limit else []
            self._medium.set_item(ANALYTICS_LOG_KEY, json.dumps(log))
        except (StorageError, OSError, TypeError, ValueError) as exc:
            logger.debug("Analytics log not persisted: %s", exc)

    # ── Forwarding ───────────────────────────────────────

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def flush(self) -> int:
        """Forward queued events to the configured endpoint.

        Returns the number of events delivered. The queue is emptied
        whether or not delivery succeeds; there is no retry.
        """
        batch = list(self._pending)
        self._pending.clear()
        endpoint = self._settings.analytics_endpoint
        if not batch or not endpoint:
            return 0

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=5.0) as client:
                resp = await client.post(str(endpoint), json={"events": batch})
            if resp.is_success:
                logger.debug("Forwarded %d analytics events", len(batch))
                return len(batch)
            logger.warning(
                "[Analytics] Forwarding failed: %s %s", resp.status_code, resp.text
            )
            return 0
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("[Analytics] Failed to forward events: %s", exc)
            return 0
