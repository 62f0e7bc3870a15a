"""Slip assembly - risk bands, per-league minimums, and the end-to-end slip service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

import structlog

from slipsmith.engine.edge import DEFAULT_RELIABILITY, EdgeConfig, EdgeDetector
from slipsmith.engine.projection import ProjectionConfig, ProjectionEngine
from slipsmith.engine.slip_builder import build_slip, normalize_tier
from slipsmith.evaluation import EvaluationEngine
from slipsmith.models import (
    ConsensusLine,
    EvaluatedEvent,
    EvaluationSummary,
    Event,
    GameProjection,
    ReliabilityScore,
    Slip,
)
from slipsmith.providers import ProviderSet, create_providers
from slipsmith.sports import normalize_league, sport_for_league, supported_sports, validate_date
from slipsmith.storage import get_connection, init_schema

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

    from slipsmith.config import Settings

log = structlog.get_logger(__name__)

Band = Literal["GREEN", "YELLOW", "RED"]

PROBABILITY_FLOOR = 0.60
GREEN_THRESHOLD = 0.77

MOCK_DATA_WARNING = "Demonstration data: events are generated by the mock provider, not live markets."


@dataclass
class SlipConfig:
    default_limit: int = 20
    min_probability: float = PROBABILITY_FLOOR
    league_minimums: dict[str, int] = field(default_factory=lambda: {"NBA": 30, "NFL": 15})
    default_minimum: int = 20

    def minimum_for(self, league: str) -> int:
        return self.league_minimums.get(league.upper(), self.default_minimum)


def effective_probability(event: Event) -> float:
    """Raw probability scaled into a +/-5% band by historical reliability."""
    reliability = event.reliability if event.reliability is not None else DEFAULT_RELIABILITY
    return event.probability * (0.9 + 0.1 * reliability)


def band(event: Event) -> Band:
    p = effective_probability(event)
    if p < PROBABILITY_FLOOR:
        return "RED"
    if p > GREEN_THRESHOLD:
        return "GREEN"
    return "YELLOW"


def select_events(
    events: list[Event],
    league: str,
    limit: int | None = None,
    config: SlipConfig | None = None,
) -> tuple[list[Event], str | None]:
    """GREEN by raw probability, then YELLOW, up to max(limit, league minimum). RED never selected.

    Returns (selected, warning); warning is set when the eligible pool is below the minimum.
    """
    config = config or SlipConfig()
    minimum = config.minimum_for(league)
    effective_limit = max(limit or config.default_limit, minimum)

    green = [e for e in events if band(e) == "GREEN"]
    yellow = [e for e in events if band(e) == "YELLOW"]
    green.sort(key=lambda e: e.probability, reverse=True)
    yellow.sort(key=lambda e: e.probability, reverse=True)
    selected = (green + yellow)[:effective_limit]

    warning = None
    pool = len(green) + len(yellow)
    if pool < minimum:
        warning = f"Only {pool} eligible events for {league.upper()}; minimum is {minimum}."
    return selected, warning


def _join_warnings(*warnings: str | None) -> str | None:
    parts = [w for w in warnings if w]
    return " ".join(parts) if parts else None


class SlipService:
    """Projection -> edges -> selection -> ledger, plus evaluation and reporting passthroughs."""

    def __init__(
        self,
        providers: ProviderSet,
        conn: DuckDBPyConnection,
        *,
        projection_config: ProjectionConfig | None = None,
        edge_config: EdgeConfig | None = None,
        slip_config: SlipConfig | None = None,
        mock_mode: bool = False,
    ):
        self.providers = providers
        self.conn = conn
        self.projection = ProjectionEngine(providers, projection_config)
        self.edges = EdgeDetector(edge_config)
        self.slip_config = slip_config or SlipConfig()
        self.ledger = EvaluationEngine(conn, providers.box_score)
        self.mock_mode = mock_mode

    @classmethod
    def from_settings(cls, settings: Settings, conn: DuckDBPyConnection | None = None) -> SlipService:
        if conn is None:
            conn = get_connection(settings.db_path)
        init_schema(conn)
        return cls(
            create_providers(settings),
            conn,
            projection_config=settings.projection_config(),
            edge_config=settings.edge_config(),
            slip_config=settings.slip_config(),
            mock_mode=settings.use_mock_data,
        )

    async def get_projections(self, league: str, date: str) -> list[GameProjection]:
        return await self.projection.generate_projections(league, date)

    async def _consensus_lines(self, league: str, date: str) -> list[ConsensusLine]:
        try:
            return await self.providers.odds.get_consensus_props(date, league)
        except Exception as e:
            log.warning("odds_unavailable", league=league, date=date, error=str(e))
            return []

    async def find_events(self, date: str, sport: str) -> list[Event]:
        """All edges for the league/date (no probability floor, no slip selection)."""
        date = validate_date(date).isoformat()
        league = normalize_league(sport)
        projections = await self.projection.generate_projections(league, date)
        if not projections:
            return []
        lines = await self._consensus_lines(league, date)
        reliability = self.ledger.get_reliability_scores(sport_for_league(league).value, league)
        return self.edges.find_edges(projections, lines, reliability)

    async def get_top_events(
        self,
        date: str,
        sport: str,
        tier: str = "starter",
        limit: int | None = None,
        min_probability: float | None = None,
    ) -> Slip:
        date = validate_date(date).isoformat()
        league = normalize_league(sport)
        tier_value = normalize_tier(tier)
        floor = max(min_probability if min_probability is not None else self.slip_config.min_probability, PROBABILITY_FLOOR)

        events = await self.find_events(date, league)
        candidates = self.edges.filter_by_probability(events, floor)
        selected, warning = select_events(candidates, league, limit, self.slip_config)
        if self.mock_mode:
            warning = _join_warnings(warning, MOCK_DATA_WARNING)

        stored = self.ledger.store_events(selected)
        log.info(
            "slip_built",
            league=league,
            date=date,
            tier=tier_value,
            candidates=len(events),
            selected=len(selected),
            stored=stored,
        )
        return build_slip(selected, league, date, tier_value, warning)

    async def evaluate_date(self, date: str) -> list[EvaluatedEvent]:
        return await self.ledger.evaluate_date(date)

    def get_summary(self, start: str, end: str) -> EvaluationSummary:
        return self.ledger.get_summary(start, end)

    def get_reliability_report(self, sport: str | None = None) -> list[ReliabilityScore]:
        return self.ledger.get_reliability_report(sport)

    @staticmethod
    def supported_sports() -> dict[str, list[str]]:
        return supported_sports()

    async def close(self) -> None:
        await self.providers.aclose()
        self.conn.close()
