"""
Pytest configuration and fixtures.

Gateway tests run against an in-memory stand-in for the Supabase tables
(patched over the ``scoreline.db`` helpers) and a stubbed Highlightly client,
so no network or database is needed.
"""

import copy
import os
import uuid
from datetime import datetime, timezone

import pytest

# Settings are read on first use; make sure the required keys exist before
# anything imports the web app.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("HIGHLIGHTLY_KEY", "test-highlightly-key")

from scoreline import config, db  # noqa: E402
from scoreline.errors import ConfigurationError, UpstreamError  # noqa: E402
from scoreline.ingestion import highlightly_client  # noqa: E402

NOW = datetime(2025, 3, 1, 18, 0, tzinfo=timezone.utc)


class FakeStore:
    """Dict-of-lists tables with the same call surface as ``scoreline.db``."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, str]] = []

    def rows(self, table):
        return self.tables.setdefault(table, [])

    def add(self, table, **row):
        row.setdefault("id", str(uuid.uuid4()))
        self.rows(table).append(row)
        return row

    @staticmethod
    def _matches(row, filters):
        return all(row.get(k) == v for k, v in (filters or {}).items())

    def select_rows(self, table, columns="*", filters=None):
        self.calls.append(("select", table))
        return [copy.deepcopy(r) for r in self.rows(table) if self._matches(r, filters)]

    def select_one(self, table, columns="*", filters=None):
        rows = self.select_rows(table, columns, filters)
        return rows[0] if rows else None

    def select_in(self, table, column, values, columns="*"):
        self.calls.append(("select", table))
        return [copy.deepcopy(r) for r in self.rows(table) if r.get(column) in values]

    def upsert_rows(self, table, rows, on_conflict):
        self.calls.append(("upsert", table))
        keys = on_conflict.split(",")
        out = []
        for new in rows:
            existing = next(
                (r for r in self.rows(table) if all(r.get(k) == new.get(k) for k in keys)),
                None,
            )
            if existing is None:
                existing = {"id": str(uuid.uuid4())}
                self.rows(table).append(existing)
            existing.update(copy.deepcopy(new))
            out.append(copy.deepcopy(existing))
        return out

    def update_rows(self, table, values, filters):
        self.calls.append(("update", table))
        out = []
        for r in self.rows(table):
            if self._matches(r, filters):
                r.update(copy.deepcopy(values))
                out.append(copy.deepcopy(r))
        return out

    def delete_rows(self, table, filters):
        self.calls.append(("delete", table))
        kept, removed = [], []
        for r in self.rows(table):
            (removed if self._matches(r, filters) else kept).append(r)
        self.tables[table] = kept
        return removed


class StubProvider:
    """Records provider calls and replays canned payloads (or raises them)."""

    def __init__(self):
        self.configured = True
        self.match = None
        self.h2h = None
        self.lineups = None
        self.calls: list[tuple] = []

    def _reply(self, payload):
        if isinstance(payload, Exception):
            raise payload
        return copy.deepcopy(payload)

    def ensure_configured(self):
        if not self.configured:
            raise ConfigurationError("HIGHLIGHTLY_KEY not configured")
        return "test-highlightly-key"

    def fetch_match(self, endpoint, highlightly_id):
        self.calls.append(("match", endpoint, highlightly_id))
        return self._reply(self.match)

    def fetch_head_to_head(self, endpoint, team_one_id, team_two_id):
        self.calls.append(("h2h", endpoint, team_one_id, team_two_id))
        return self._reply(self.h2h)

    def fetch_lineups(self, endpoint, highlightly_id):
        self.calls.append(("lineups", endpoint, highlightly_id))
        return self._reply(self.lineups)

    def fail(self, status=503):
        return UpstreamError(f"HTTP {status}", status=status)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop the cached Settings so per-test env changes take effect."""
    config._settings = None
    yield
    config._settings = None


@pytest.fixture
def store(monkeypatch):
    """In-memory tables patched over the scoreline.db helpers."""
    fake = FakeStore()
    for name in ("select_rows", "select_one", "select_in", "upsert_rows", "update_rows", "delete_rows"):
        monkeypatch.setattr(db, name, getattr(fake, name))
    return fake


@pytest.fixture
def provider(monkeypatch):
    """Stubbed Highlightly client."""
    stub = StubProvider()
    for name in ("ensure_configured", "fetch_match", "fetch_head_to_head", "fetch_lineups"):
        monkeypatch.setattr(highlightly_client, name, getattr(stub, name))
    return stub


@pytest.fixture
def now():
    return NOW
