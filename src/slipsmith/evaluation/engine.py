"""Evaluation engine - scores stored events against box scores and maintains the reliability ledger."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import duckdb
import structlog

from slipsmith.errors import GameNotFinal, PersistenceFailure
from slipsmith.markets import GAME_TOTAL, TEAM_TOTAL, get_market, normalize_market
from slipsmith.models import (
    BoxScore,
    EvaluatedEvent,
    EvaluationSummary,
    Event,
    EventResult,
    ReliabilityScore,
)
from slipsmith.sports import validate_date
from slipsmith.storage.evaluations import (
    get_evaluations,
    get_reliability,
    insert_evaluation,
    list_reliability,
    reliability_map,
    summarize,
    upsert_reliability,
)
from slipsmith.storage.events import pending_events, upsert_events

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

    from slipsmith.providers import BoxScoreProvider

log = structlog.get_logger(__name__)


def classify_result(direction: str, line: float, actual: float) -> EventResult:
    """push iff actual == line; hit iff the actual lands on the picked side."""
    if actual == line:
        return "push"
    if direction == "over":
        return "hit" if actual > line else "miss"
    return "hit" if actual < line else "miss"


def resolve_actual(event: Event, box: BoxScore) -> float | None:
    """Actual value for the event's market from a final box score, or None if undeterminable."""
    market = normalize_market(event.market)
    if market == TEAM_TOTAL:
        if event.team_id == box.home_team_id:
            return box.home_score
        if event.team_id == box.away_team_id:
            return box.away_score
        return None
    if market == GAME_TOTAL:
        return box.home_score + box.away_score
    if not event.player_id:
        return None
    stats = box.player_stats.get(event.player_id)
    spec = get_market(market)
    if stats is None or spec is None:
        return None
    if spec.components:
        if not all(c in stats for c in spec.components):
            return None
        return sum(stats[c] for c in spec.components)
    return stats.get(spec.stat_key)


def _subject_kind(event: Event) -> str:
    if event.player_id:
        return "player"
    if event.team_id:
        return "team"
    return "game"


class EvaluationEngine:
    """Evaluation ledger over one DuckDB connection.

    evaluate_date runs are serialized by an asyncio.Lock, and each game's evaluations
    are written with their reliability updates in a single transaction.
    """

    def __init__(self, conn: DuckDBPyConnection, box_scores: BoxScoreProvider):
        self.conn = conn
        self.box_scores = box_scores
        self._lock = asyncio.Lock()

    # --- writes ---
    def store_events(self, events: list[Event]) -> int:
        try:
            return upsert_events(self.conn, events)
        except duckdb.Error as e:
            raise PersistenceFailure(f"store_events failed: {e}") from e

    async def evaluate_date(self, date: str) -> list[EvaluatedEvent]:
        """Evaluate every pending event on date. Unfinished or unavailable games stay pending."""
        date = validate_date(date).isoformat()
        async with self._lock:
            try:
                pending = pending_events(self.conn, date)
            except duckdb.Error as e:
                raise PersistenceFailure(f"pending_events failed: {e}") from e
            if not pending:
                log.info("evaluate_nothing_pending", date=date)
                return []

            by_game: dict[tuple[str, str], list[Event]] = defaultdict(list)
            for event in pending:
                by_game[(event.league, event.game_id)].append(event)

            evaluated: list[EvaluatedEvent] = []
            deferred = 0
            for (league, game_id), events in by_game.items():
                try:
                    box = await self._final_box_score(game_id, league)
                except GameNotFinal:
                    log.info("game_not_final", game_id=game_id, pending=len(events))
                    deferred += len(events)
                    continue
                except Exception as e:
                    log.warning("box_score_unavailable", game_id=game_id, error=str(e))
                    deferred += len(events)
                    continue
                evaluated.extend(self._record_game(game_id, events, box))

            log.info(
                "evaluation_complete",
                date=date,
                evaluated=len(evaluated),
                deferred=deferred,
                games=len(by_game),
            )
            return evaluated

    async def _final_box_score(self, game_id: str, league: str) -> BoxScore:
        box = await self.box_scores.get_box_score(game_id, league)
        if box is None or not box.is_final:
            raise GameNotFinal(game_id)
        return box

    def _record_game(self, game_id: str, events: list[Event], box: BoxScore) -> list[EvaluatedEvent]:
        now = datetime.now(timezone.utc)
        results: list[EvaluatedEvent] = []
        for event in events:
            actual = resolve_actual(event, box)
            result: EventResult = "void" if actual is None else classify_result(event.direction, event.line, actual)
            results.append(
                EvaluatedEvent(**event.model_dump(), actual_value=actual, result=result, evaluated_at=now)
            )

        try:
            self.conn.begin()
        except duckdb.Error as e:
            raise PersistenceFailure(f"could not open transaction for game {game_id}: {e}") from e
        try:
            scores: dict[tuple[str, str, str, str], ReliabilityScore] = {}
            for ev in results:
                insert_evaluation(self.conn, ev)
                key = (ev.sport, ev.league, ev.subject_id, normalize_market(ev.market))
                current = scores.get(key) or self._load_reliability(ev, key)
                scores[key] = current.record(ev.result, ev.edge_score, now)
            for score in scores.values():
                upsert_reliability(self.conn, score)
            self.conn.commit()
        except duckdb.Error as e:
            self.conn.rollback()
            raise PersistenceFailure(f"evaluation write failed for game {game_id}: {e}") from e
        log.debug("game_evaluated", game_id=game_id, events=len(results), reliability_keys=len(scores))
        return results

    def _load_reliability(self, ev: EvaluatedEvent, key: tuple[str, str, str, str]) -> ReliabilityScore:
        sport, league, subject_id, market = key
        current = get_reliability(self.conn, sport, league, subject_id, market)
        if current is None:
            current = ReliabilityScore(
                sport=sport,
                league=league,
                subject_id=subject_id,
                subject_kind=_subject_kind(ev),
                market=market,
            )
        return current

    # --- reads ---
    def get_evaluations(self, date: str) -> list[EvaluatedEvent]:
        return get_evaluations(self.conn, validate_date(date).isoformat())

    def pending_events(self, date: str) -> list[Event]:
        return pending_events(self.conn, validate_date(date).isoformat())

    def get_summary(self, start: str, end: str) -> EvaluationSummary:
        start = validate_date(start).isoformat()
        end = validate_date(end).isoformat()
        try:
            return summarize(self.conn, start, end)
        except duckdb.Error as e:
            raise PersistenceFailure(f"summary failed: {e}") from e

    def get_reliability_report(self, sport: str | None = None) -> list[ReliabilityScore]:
        try:
            return list_reliability(self.conn, sport)
        except duckdb.Error as e:
            raise PersistenceFailure(f"reliability report failed: {e}") from e

    def get_reliability_scores(self, sport: str, league: str) -> dict[tuple[str, str], float]:
        try:
            return reliability_map(self.conn, sport, league)
        except duckdb.Error as e:
            raise PersistenceFailure(f"reliability read failed: {e}") from e
