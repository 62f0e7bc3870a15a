"""Evaluation rows and reliability ledger persistence."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from slipsmith.models import EvaluatedEvent, EvaluationSummary, Event, ReliabilityScore

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

_RELIABILITY_COLS = [
    "sport", "league", "subject_id", "subject_kind", "market", "total_bets", "hits",
    "misses", "pushes", "voids", "hit_rate", "average_edge", "last_updated",
]


def _to_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def _from_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def insert_evaluation(conn: DuckDBPyConnection, evaluated: EvaluatedEvent) -> None:
    """Primary key on event_id rejects a second evaluation of the same event."""
    conn.execute(
        """
        INSERT INTO evaluations (
            event_id, date, sport, league, subject_id, market, actual_value,
            result, edge_score, evaluated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            evaluated.event_id,
            evaluated.date,
            evaluated.sport,
            evaluated.league,
            evaluated.subject_id,
            evaluated.market,
            evaluated.actual_value,
            evaluated.result,
            evaluated.edge_score,
            _to_ms(evaluated.evaluated_at),
        ],
    )


def get_evaluations(conn: DuckDBPyConnection, date: str) -> list[EvaluatedEvent]:
    """Evaluated events for a date, joined back to their stored event payload."""
    rows = conn.execute(
        """
        SELECT e.payload, v.actual_value, v.result, v.evaluated_at
        FROM evaluations v
        JOIN events e ON e.event_id = v.event_id
        WHERE v.date = ?
        ORDER BY v.event_id
        """,
        [date],
    ).fetchall()
    return [_evaluated_from_row(*r) for r in rows]


def _evaluated_from_row(payload: str, actual: float | None, result: str, evaluated_at: int) -> EvaluatedEvent:
    event = Event.model_validate_json(payload)
    return EvaluatedEvent(
        **event.model_dump(),
        actual_value=actual,
        result=result,
        evaluated_at=_from_ms(evaluated_at),
    )


def summarize(conn: DuckDBPyConnection, start: str, end: str) -> EvaluationSummary:
    row = conn.execute(
        """
        SELECT
            COUNT(*),
            COUNT(*) FILTER (WHERE result = 'hit'),
            COUNT(*) FILTER (WHERE result = 'miss'),
            COUNT(*) FILTER (WHERE result = 'push'),
            COUNT(*) FILTER (WHERE result = 'void'),
            AVG(edge_score)
        FROM evaluations
        WHERE date >= ? AND date <= ?
        """,
        [start, end],
    ).fetchone()
    total, hits, misses, pushes, voids, avg_edge = row
    decided = hits + misses
    return EvaluationSummary(
        total=total,
        hits=hits,
        misses=misses,
        pushes=pushes,
        voids=voids,
        hit_rate=hits / decided if decided else 0.0,
        average_edge=float(avg_edge or 0.0),
    )


def _score_from_row(row: tuple[Any, ...]) -> ReliabilityScore:
    data = dict(zip(_RELIABILITY_COLS, row))
    data["last_updated"] = _from_ms(data["last_updated"])
    return ReliabilityScore.model_validate(data)


def get_reliability(
    conn: DuckDBPyConnection,
    sport: str,
    league: str,
    subject_id: str,
    market: str,
) -> ReliabilityScore | None:
    row = conn.execute(
        f"""
        SELECT {", ".join(_RELIABILITY_COLS)}
        FROM reliability_scores
        WHERE sport = ? AND league = ? AND subject_id = ? AND market = ?
        """,
        [sport, league, subject_id, market],
    ).fetchone()
    return _score_from_row(row) if row else None


def upsert_reliability(conn: DuckDBPyConnection, score: ReliabilityScore) -> None:
    last_updated = score.last_updated or datetime.now(timezone.utc)
    conn.execute(
        f"""
        INSERT INTO reliability_scores ({", ".join(_RELIABILITY_COLS)})
        VALUES ({", ".join("?" for _ in _RELIABILITY_COLS)})
        ON CONFLICT (sport, league, subject_id, market) DO UPDATE SET
            subject_kind = excluded.subject_kind,
            total_bets = excluded.total_bets,
            hits = excluded.hits,
            misses = excluded.misses,
            pushes = excluded.pushes,
            voids = excluded.voids,
            hit_rate = excluded.hit_rate,
            average_edge = excluded.average_edge,
            last_updated = excluded.last_updated
        """,
        [
            score.sport,
            score.league,
            score.subject_id,
            score.subject_kind,
            score.market,
            score.total_bets,
            score.hits,
            score.misses,
            score.pushes,
            score.voids,
            score.hit_rate,
            score.average_edge,
            _to_ms(last_updated),
        ],
    )


def list_reliability(conn: DuckDBPyConnection, sport: str | None = None) -> list[ReliabilityScore]:
    """Full ledger, optionally for one sport (matches sport or league code), best first."""
    where = "1=1"
    params: list[str] = []
    if sport:
        where = "(LOWER(sport) = LOWER(?) OR UPPER(league) = UPPER(?))"
        params = [sport, sport]
    rows = conn.execute(
        f"""
        SELECT {", ".join(_RELIABILITY_COLS)}
        FROM reliability_scores
        WHERE {where}
        ORDER BY hit_rate DESC, total_bets DESC, subject_id, market
        """,
        params,
    ).fetchall()
    return [_score_from_row(r) for r in rows]


def reliability_map(conn: DuckDBPyConnection, sport: str, league: str) -> dict[tuple[str, str], float]:
    """(subject_id, market) -> hit_rate for keys with at least one decided bet."""
    rows = conn.execute(
        """
        SELECT subject_id, market, hit_rate
        FROM reliability_scores
        WHERE sport = ? AND league = ? AND hits + misses > 0
        """,
        [sport, league],
    ).fetchall()
    return {(subject_id, market): float(hit_rate) for subject_id, market, hit_rate in rows}
