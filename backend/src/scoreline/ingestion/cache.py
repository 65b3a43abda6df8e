"""Cache freshness rules and per-key request serialization for the gateways."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

# status_short values after which provider data no longer changes
FINISHED_STATUSES: frozenset[str] = frozenset({"FT", "AET", "PEN", "CANC", "ABD", "AWD", "WO"})

MATCH_TTL_LIVE = timedelta(minutes=1)
MATCH_TTL_FINISHED = timedelta(days=7)
H2H_TTL = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_finished(status_short: str | None) -> bool:
    return (status_short or "") in FINISHED_STATUSES


def match_ttl(status_short: str | None) -> timedelta:
    return MATCH_TTL_FINISHED if is_finished(status_short) else MATCH_TTL_LIVE


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse a Postgres/ISO timestamp; naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        try:
            ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def cache_age(fetched_at: str | datetime | None, now: datetime) -> timedelta | None:
    ts = parse_timestamp(fetched_at)
    return None if ts is None else now - ts


def is_fresh(fetched_at: str | datetime | None, ttl: timedelta, now: datetime) -> bool:
    age = cache_age(fetched_at, now)
    return age is not None and age < ttl


class KeyedLocks:
    """One lock per natural cache key.

    Concurrent requests for the same key run one at a time, so the second
    one reads what the first wrote instead of calling upstream again.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._waiters: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
