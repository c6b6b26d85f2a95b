"""Tests for the OtpStore and its storage medium."""

from __future__ import annotations

import json
import logging

import pytest

from otp_login.models.otp import OtpRecord
from otp_login.storage.medium import MemoryStorage, StorageError, StorageQuotaExceeded
from otp_login.storage.otp_store import OtpStore


def _record(code: str = "123456", attempts: int = 0) -> OtpRecord:
    return OtpRecord(code=code, created_at=1_000, expires_at=61_000, attempts=attempts)


class BrokenStorage(MemoryStorage):
    """Medium whose every call fails, like disabled browser storage."""

    def get_item(self, key):
        raise StorageError("storage disabled")

    def set_item(self, key, value):
        raise StorageError("storage disabled")


# ── Basic mapping behaviour ──────────────────────────────

def test_get_missing_identity_returns_none(store):
    assert store.get("a@x.com") is None


def test_put_then_get(store):
    store.put("a@x.com", _record())
    assert store.get("a@x.com") == _record()


def test_put_replaces_existing_record(store):
    store.put("a@x.com", _record("111111", attempts=2))
    store.put("a@x.com", _record("222222"))

    record = store.get("a@x.com")
    assert record.code == "222222"
    assert record.attempts == 0


def test_identities_are_independent(store):
    store.put("a@x.com", _record("111111"))
    store.put("b@x.com", _record("222222"))
    store.delete("a@x.com")

    assert store.get("a@x.com") is None
    assert store.get("b@x.com").code == "222222"


def test_delete_missing_is_noop(store, medium):
    store.delete("nobody@x.com")
    assert medium.get_item("otp_store") is None


def test_deleting_last_record_removes_blob(store, medium):
    store.put("a@x.com", _record())
    store.put("b@x.com", _record())

    store.delete("a@x.com")
    assert medium.get_item("otp_store") is not None

    store.delete("b@x.com")
    assert medium.get_item("otp_store") is None
    assert len(medium) == 0


def test_identity_key_is_literal(store):
    store.put("A@X.com", _record())
    assert store.get("a@x.com") is None


def test_blob_is_json_under_store_key(store, medium):
    store.put("a@x.com", _record())
    blob = json.loads(medium.get_item("otp_store"))
    assert blob == {
        "a@x.com": {
            "code": "123456",
            "created_at": 1_000,
            "expires_at": 61_000,
            "attempts": 0,
        }
    }


def test_stores_sharing_a_medium_see_each_other(medium, settings):
    OtpStore(medium, settings).put("a@x.com", _record())
    assert OtpStore(medium, settings).get("a@x.com") is not None


# ── Degraded storage ─────────────────────────────────────

def test_corrupt_blob_reads_as_empty(store, medium):
    medium.set_item("otp_store", "{not json")
    assert store.get("a@x.com") is None


def test_wrong_shape_reads_as_empty(store, medium):
    medium.set_item("otp_store", json.dumps({"a@x.com": {"code": 123}}))
    assert store.get("a@x.com") is None


def test_broken_medium_never_raises(settings, caplog):
    store = OtpStore(BrokenStorage(), settings)

    with caplog.at_level(logging.WARNING):
        store.put("a@x.com", _record())
        assert store.get("a@x.com") is None
        store.delete("a@x.com")

    assert "Failed to save store" in caplog.text


def test_quota_exceeded_write_is_dropped(settings):
    medium = MemoryStorage(quota=10)
    store = OtpStore(medium, settings)

    store.put("a@x.com", _record())

    assert store.get("a@x.com") is None
    assert len(medium) == 0


def test_memory_storage_quota_raises():
    medium = MemoryStorage(quota=5)
    with pytest.raises(StorageQuotaExceeded):
        medium.set_item("key", "value")


def test_memory_storage_quota_counts_replaced_value_once():
    medium = MemoryStorage(quota=8)
    medium.set_item("k", "aaaa")
    medium.set_item("k", "bbbbbbb")
    assert medium.get_item("k") == "bbbbbbb"
