"""Best-effort OTP store persisted as one JSON blob in a storage medium."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from otp_login.config import Settings, settings as default_settings
from otp_login.models.otp import OtpRecord, OtpStoreData
from otp_login.storage.medium import StorageError, StorageMedium

logger = logging.getLogger(__name__)


class OtpStore:
    """Maps ``identity → OtpRecord``, at most one record per identity.

    Every operation re-reads the blob from the medium, so state written by
    another store sharing the same medium is always seen. Read failures
    behave as an empty store and write failures are logged and dropped:
    nothing here ever raises to the caller.
    """

    def __init__(self, medium: StorageMedium, settings: Settings | None = None) -> None:
        self._medium = medium
        self._key = (settings or default_settings).otp_store_key

    def get(self, identity: str) -> OtpRecord | None:
        """Return the record for *identity*, or ``None``."""
        return self._load().get(identity)

    def put(self, identity: str, record: OtpRecord) -> None:
        """Replace whatever record *identity* had with *record*."""
        records = self._load()
        records[identity] = record
        self._save(records)

    def delete(self, identity: str) -> None:
        """Remove the record for *identity*; no-op if absent."""
        records = self._load()
        if records.pop(identity, None) is None:
            return
        if records:
            self._save(records)
        else:
            self._clear()

    # ── Private helpers ──────────────────────────────────

    def _load(self) -> dict[str, OtpRecord]:
        try:
            raw = self._medium.get_item(self._key)
            if not raw:
                return {}
            return OtpStoreData.model_validate_json(raw).root
        except (StorageError, OSError, ValidationError, ValueError) as exc:
            logger.warning("[OTP] Failed to read store, treating as empty: %s", exc)
            return {}

    def _save(self, records: dict[str, OtpRecord]) -> None:
        try:
            self._medium.set_item(self._key, OtpStoreData(records).model_dump_json())
        except (StorageError, OSError, ValueError, TypeError) as exc:
            logger.warning("[OTP] Failed to save store: %s", exc)

    def _clear(self) -> None:
        try:
            self._medium.remove_item(self._key)
        except (StorageError, OSError) as exc:
            logger.warning("[OTP] Failed to remove store: %s", exc)
