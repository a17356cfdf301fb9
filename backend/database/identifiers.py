"""
Record identifiers and timestamps.

Ids look like "<epoch-ms>_<base36 suffix>". The millisecond component never
moves backwards within a process, and timestamps handed out by utc_now_iso()
are non-decreasing, so a record's _updatedAt can never precede _createdAt
even if the wall clock is adjusted.
"""

import secrets
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

_BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
SUFFIX_LENGTH = 13

_lock = threading.Lock()
_last_id_ms = 0
_last_timestamp: Optional[datetime] = None


def _random_suffix(length: int = SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(length))


def _monotonic_ms() -> int:
    global _last_id_ms
    now_ms = time.time_ns() // 1_000_000
    with _lock:
        if now_ms < _last_id_ms:
            now_ms = _last_id_ms
        _last_id_ms = now_ms
    return now_ms


def generate_id() -> str:
    """Generate a unique record id from a monotonic time part and a random suffix."""
    return f"{_monotonic_ms()}_{_random_suffix()}"


def utc_now() -> datetime:
    """Current UTC time in millisecond precision, never earlier than the last value returned."""
    global _last_timestamp
    now = datetime.now(timezone.utc)
    now = now - timedelta(microseconds=now.microsecond % 1000)
    with _lock:
        if _last_timestamp is not None and now < _last_timestamp:
            now = _last_timestamp
        _last_timestamp = now
    return now


def utc_now_iso() -> str:
    """ISO-8601 timestamp, e.g. 2024-01-01T00:00:00.000+00:00"""
    return utc_now().isoformat(timespec="milliseconds")
