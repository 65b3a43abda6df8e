"""Supabase client helpers – match data lives in the 'sports_data' schema."""

from __future__ import annotations

from supabase import Client, create_client

from scoreline.config import get_settings

_client: Client | None = None


def get_client() -> Client:
    """Return a singleton Supabase client (service-role for the gateways)."""
    global _client
    if _client is None:
        s = get_settings()
        _client = create_client(s.supabase_url, s.supabase_service_role_key)
    return _client


def _table(name: str):
    """Return a table query builder scoped to the sports_data schema."""
    return get_client().schema(get_settings().supabase_schema).table(name)


def select_rows(
    table: str,
    columns: str = "*",
    filters: dict | None = None,
) -> list[dict]:
    """Simple select with optional equality filters."""
    q = _table(table).select(columns)
    for k, v in (filters or {}).items():
        q = q.eq(k, v)
    return q.execute().data


def select_one(
    table: str,
    columns: str = "*",
    filters: dict | None = None,
) -> dict | None:
    """Return the first row matching equality filters, or None."""
    rows = select_rows(table, columns, filters)
    return rows[0] if rows else None


def select_in(
    table: str,
    column: str,
    values: list,
    columns: str = "*",
) -> list[dict]:
    """Select rows whose ``column`` is one of ``values``."""
    if not values:
        return []
    return _table(table).select(columns).in_(column, values).execute().data


def upsert_rows(table: str, rows: list[dict], on_conflict: str) -> list[dict]:
    """Upsert rows into a table, returning the upserted records."""
    if not rows:
        return []
    return (
        _table(table)
        .upsert(rows, on_conflict=on_conflict)
        .execute()
        .data
    )


def update_rows(
    table: str,
    values: dict,
    filters: dict,
) -> list[dict]:
    """Update rows matching equality filters. Returns updated records."""
    q = _table(table).update(values)
    for k, v in filters.items():
        q = q.eq(k, v)
    return q.execute().data


def delete_rows(table: str, filters: dict) -> list[dict]:
    """Delete rows matching equality filters. Returns deleted records."""
    q = _table(table).delete()
    for k, v in filters.items():
        q = q.eq(k, v)
    return q.execute().data
