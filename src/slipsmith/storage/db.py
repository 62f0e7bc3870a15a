"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
-- Selected events (one row per deterministic event id)
CREATE TABLE IF NOT EXISTS events (
    event_id        VARCHAR PRIMARY KEY,
    date            VARCHAR NOT NULL,
    sport           VARCHAR NOT NULL,
    league          VARCHAR NOT NULL,
    game_id         VARCHAR NOT NULL,
    subject_id      VARCHAR NOT NULL,
    market          VARCHAR NOT NULL,
    line            DOUBLE NOT NULL,
    direction       VARCHAR NOT NULL,
    probability     DOUBLE NOT NULL,
    edge_score      DOUBLE NOT NULL,
    payload         JSON NOT NULL,
    stored_at       BIGINT NOT NULL
);

-- Evaluations (primary key = event id: an event is evaluated at most once)
CREATE TABLE IF NOT EXISTS evaluations (
    event_id        VARCHAR PRIMARY KEY,
    date            VARCHAR NOT NULL,
    sport           VARCHAR NOT NULL,
    league          VARCHAR NOT NULL,
    subject_id      VARCHAR NOT NULL,
    market          VARCHAR NOT NULL,
    actual_value    DOUBLE,
    result          VARCHAR NOT NULL,
    edge_score      DOUBLE NOT NULL,
    evaluated_at    BIGINT NOT NULL
);

-- Rolling hit-rate ledger
CREATE TABLE IF NOT EXISTS reliability_scores (
    sport           VARCHAR NOT NULL,
    league          VARCHAR NOT NULL,
    subject_id      VARCHAR NOT NULL,
    subject_kind    VARCHAR NOT NULL,
    market          VARCHAR NOT NULL,
    total_bets      INTEGER NOT NULL,
    hits            INTEGER NOT NULL,
    misses          INTEGER NOT NULL,
    pushes          INTEGER NOT NULL,
    voids           INTEGER NOT NULL,
    hit_rate        DOUBLE NOT NULL,
    average_edge    DOUBLE NOT NULL,
    last_updated    BIGINT NOT NULL,
    PRIMARY KEY (sport, league, subject_id, market)
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close. ':memory:' is passed through."""
    if str(db_path) == ":memory:":
        return duckdb.connect(":memory:")
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables and indexes if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
