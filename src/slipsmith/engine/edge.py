"""Edge detector - compares projections with consensus lines and ranks the disagreements."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

import structlog

from slipsmith.engine.slip_builder import build_event_id
from slipsmith.markets import GAME_TOTAL, TEAM_MARKETS, TEAM_TOTAL, format_market, get_market, normalize_market, team_threshold
from slipsmith.models import ConsensusLine, Event, GameProjection, PlayerProjection

log = structlog.get_logger(__name__)

DEFAULT_RELIABILITY = 0.5

# Extreme probabilities are pulled toward 0.5 by this share.
REGRESSION_STRENGTH = 0.15
REGRESSION_UPPER = 0.90
REGRESSION_LOWER = 0.10

STRONG_EDGE = 3.0
MODERATE_EDGE = 1.5

# (subject_id, market) -> historical hit rate
ReliabilityMap = Mapping[tuple[str, str], float]


@dataclass
class EdgeConfig:
    min_edge: float = 0.5
    edge_weight: float = 0.5
    confidence_weight: float = 0.3
    reliability_weight: float = 0.2


def erf(x: float) -> float:
    """Abramowitz-Stegun 7.1.26 approximation (|error| < 1.5e-7)."""
    a1, a2, a3, a4, a5 = 0.254829592, -0.284496736, 1.421413741, -1.453152027, 1.061405429
    p = 0.3275911
    sign = -1.0 if x < 0 else 1.0
    x = abs(x)
    t = 1.0 / (1.0 + p * x)
    y = 1.0 - (((((a5 * t + a4) * t) + a3) * t + a2) * t + a1) * t * math.exp(-x * x)
    return sign * y


def normal_cdf(z: float) -> float:
    return 0.5 + 0.5 * erf(z / math.sqrt(2))


def uncertainty_factor(confidence: float) -> float:
    """1.0 at full confidence, up to 1.5 at confidence <= 0.5."""
    return 1 + (1 - min(1.0, max(0.5, confidence)))


def regress_to_mean(p: float) -> float:
    if p > REGRESSION_UPPER or p < REGRESSION_LOWER:
        return 0.5 + (p - 0.5) * (1 - REGRESSION_STRENGTH)
    return p


def edge_probability(edge: float, threshold: float, confidence: float) -> float:
    """Phi(z) of the signed edge, softened at the extremes, in [0, 1], 2 decimals."""
    z = edge / (threshold * uncertainty_factor(confidence))
    p = regress_to_mean(normal_cdf(z))
    return round(min(1.0, max(0.0, p)), 2)


def edge_descriptor(abs_edge: float) -> str:
    if abs_edge >= STRONG_EDGE:
        return "strong"
    if abs_edge >= MODERATE_EDGE:
        return "moderate"
    return "slight"


def build_reasoning(
    subject: str,
    market: str,
    projection: float,
    line: float,
    direction: str,
    injury_note: str | None = None,
) -> str:
    abs_edge = abs(projection - line)
    reason = f"{subject} projected for {projection:.1f} {format_market(market)}, line set at {line:g}. "
    descriptor = edge_descriptor(abs_edge)
    if descriptor == "strong":
        reason += f"Strong {direction} opportunity with {abs_edge:.1f} unit edge. "
    elif descriptor == "moderate":
        reason += f"Moderate {direction} value with {abs_edge:.1f} unit edge. "
    else:
        reason += f"Slight {direction} lean with {abs_edge:.1f} unit edge. "
    if injury_note:
        reason += f"Note: {injury_note}. "
    return reason.strip()


class EdgeDetector:
    """Turns projection-vs-line deltas into ranked Events."""

    def __init__(self, config: EdgeConfig | None = None):
        self.config = config or EdgeConfig()

    def find_edges(
        self,
        projections: list[GameProjection],
        lines: list[ConsensusLine],
        reliability: ReliabilityMap | None = None,
    ) -> list[Event]:
        """Evaluate every line; keep |edge| >= min_edge; sort by edge score descending."""
        reliability = reliability or {}
        games = {g.game_id: g for g in projections}
        players = {(g.game_id, p.player_id): p for g in projections for p in g.players}

        events: list[Event] = []
        skipped = 0
        for line in lines:
            market = normalize_market(line.market)
            event: Event | None = None
            if market in TEAM_MARKETS:
                game = games.get(line.game_id)
                if game is not None:
                    event = self._team_event(line, market, game, reliability)
            elif line.player_id:
                player = players.get((line.game_id, line.player_id))
                game = games.get(line.game_id)
                if player is not None and game is not None:
                    event = self._player_event(line, market, player, game, reliability)
            if event is None:
                skipped += 1
                continue
            if abs(event.model_projection - event.line) < self.config.min_edge:
                continue
            events.append(event)

        if skipped:
            log.debug("lines_skipped", count=skipped)
        events.sort(key=lambda e: e.edge_score, reverse=True)
        return events

    def _player_event(
        self,
        line: ConsensusLine,
        market: str,
        projection: PlayerProjection,
        game: GameProjection,
        reliability: ReliabilityMap,
    ) -> Event | None:
        spec = get_market(market)
        if spec is None:
            return None
        projected = projection.projected_stats.get(spec.stat_key)
        if projected is None:
            return None
        rel = reliability.get((projection.player_id, market), DEFAULT_RELIABILITY)
        injury = projection.adjustment("injury")
        note = injury.description if injury is not None and injury.factor < 1 else None
        subject = line.player_name or projection.player_name
        return self._make_event(
            line=line,
            market=market,
            game=game,
            projected=projected,
            threshold=spec.threshold,
            confidence=projection.confidence,
            reliability=rel,
            subject=subject,
            player_id=projection.player_id,
            player_name=subject,
            team_id=projection.team_id,
            team_name=line.team_name,
            injury_note=note,
        )

    def _team_event(
        self,
        line: ConsensusLine,
        market: str,
        game: GameProjection,
        reliability: ReliabilityMap,
    ) -> Event | None:
        if market == TEAM_TOTAL:
            if line.team_id == game.home_team.team_id:
                team = game.home_team
            elif line.team_id == game.away_team.team_id:
                team = game.away_team
            else:
                return None
            projected = team.projected_score
            confidence = team.confidence
            team_id, team_name = team.team_id, line.team_name or team.team_name
        elif market == GAME_TOTAL:
            projected = round(game.home_team.projected_score + game.away_team.projected_score, 1)
            confidence = min(game.home_team.confidence, game.away_team.confidence)
            team_id = line.team_id
            team_name = line.team_name or f"{game.away_team.team_name} @ {game.home_team.team_name}"
        else:
            return None
        subject_id = team_id or game.game_id
        rel = reliability.get((subject_id, market), DEFAULT_RELIABILITY)
        return self._make_event(
            line=line,
            market=market,
            game=game,
            projected=projected,
            threshold=team_threshold(game.sport),
            confidence=confidence,
            reliability=rel,
            subject=team_name,
            player_id=None,
            team_id=team_id,
            team_name=team_name,
        )

    def _make_event(
        self,
        *,
        line: ConsensusLine,
        market: str,
        game: GameProjection,
        projected: float,
        threshold: float,
        confidence: float,
        reliability: float,
        subject: str,
        player_id: str | None,
        team_id: str | None,
        team_name: str | None,
        player_name: str | None = None,
        injury_note: str | None = None,
    ) -> Event:
        projected = round(projected, 1)
        edge = projected - line.line
        direction = "over" if edge > 0 else "under"
        subject_id = player_id or team_id or game.game_id
        return Event(
            event_id=build_event_id(game.league, game.game_id, subject_id, market, line.line, direction, game.date),
            date=game.date,
            sport=game.sport,
            league=game.league,
            game_id=game.game_id,
            game_time=game.scheduled_time,
            player_id=player_id,
            player_name=player_name,
            team_id=team_id,
            team_name=team_name,
            market=market,
            line=line.line,
            direction=direction,
            model_projection=projected,
            probability=edge_probability(edge, threshold, confidence),
            edge_score=self.edge_score(abs(edge), threshold, confidence, reliability),
            reasoning=build_reasoning(subject, market, projected, line.line, direction, injury_note),
            reliability=reliability,
            confidence=confidence,
        )

    def edge_score(self, abs_edge: float, threshold: float, confidence: float, reliability: float) -> float:
        c = self.config
        normalized = abs_edge / threshold
        score = (normalized * c.edge_weight + confidence * c.confidence_weight + reliability * c.reliability_weight) * 10
        return round(score, 2)

    # --- ranking / filtering ---
    @staticmethod
    def top_events(events: list[Event], limit: int = 20) -> list[Event]:
        return sorted(events, key=lambda e: e.edge_score, reverse=True)[:limit]

    @staticmethod
    def filter_by_sport(events: list[Event], sport: str) -> list[Event]:
        return [e for e in events if e.sport == str(sport).lower()]

    @staticmethod
    def filter_by_league(events: list[Event], league: str) -> list[Event]:
        return [e for e in events if e.league == league.upper()]

    @staticmethod
    def filter_by_probability(events: list[Event], min_probability: float) -> list[Event]:
        return [e for e in events if e.probability >= min_probability]

    def rank(
        self,
        events: list[Event],
        *,
        min_probability: float | None = None,
        sport: str | None = None,
        league: str | None = None,
        limit: int | None = None,
    ) -> list[Event]:
        """Apply the optional filters, then order by edge score (truncated to limit)."""
        if min_probability is not None:
            events = self.filter_by_probability(events, min_probability)
        if sport is not None:
            events = self.filter_by_sport(events, sport)
        if league is not None:
            events = self.filter_by_league(events, league)
        return self.top_events(events, limit if limit is not None else len(events))
