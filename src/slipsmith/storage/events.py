"""Stored events: upsert keyed by event id, pending lookup for evaluation."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from slipsmith.models import Event

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def upsert_events(conn: DuckDBPyConnection, events: list[Event]) -> int:
    """Insert or refresh events. Re-storing the same event id overwrites in place."""
    if not events:
        return 0
    now_ms = int(time.time() * 1000)
    rows = [
        [
            e.event_id,
            e.date,
            e.sport,
            e.league,
            e.game_id,
            e.subject_id,
            e.market,
            e.line,
            e.direction,
            e.probability,
            e.edge_score,
            e.model_dump_json(),
            now_ms,
        ]
        for e in events
    ]
    conn.executemany(
        """
        INSERT INTO events (
            event_id, date, sport, league, game_id, subject_id, market, line,
            direction, probability, edge_score, payload, stored_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT (event_id) DO UPDATE SET
            probability = excluded.probability,
            edge_score = excluded.edge_score,
            payload = excluded.payload,
            stored_at = excluded.stored_at
        """,
        rows,
    )
    return len(rows)


def pending_events(conn: DuckDBPyConnection, date: str) -> list[Event]:
    """Events for the date that have no evaluation yet, grouped by game order."""
    rows = conn.execute(
        """
        SELECT e.payload
        FROM events e
        LEFT JOIN evaluations v ON v.event_id = e.event_id
        WHERE e.date = ? AND v.event_id IS NULL
        ORDER BY e.game_id, e.event_id
        """,
        [date],
    ).fetchall()
    return [Event.model_validate_json(r[0]) for r in rows]
