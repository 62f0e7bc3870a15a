"""Projection engine - team and player projections from schedule, rosters, history and injuries."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

from slipsmith.errors import MissingPlayerStats
from slipsmith.models import (
    GameInfo,
    GameProjection,
    PlayerGameStats,
    PlayerInjury,
    PlayerProjection,
    ProjectionAdjustment,
    RosterPlayer,
    TeamProjection,
)
from slipsmith.providers import ProviderSet
from slipsmith.sports import (
    DEFAULT_PLAYER_STATS,
    STAT_KEYS,
    TEAM_SCORING_STAT,
    Sport,
    normalize_league,
    sport_for_league,
    validate_date,
)

log = structlog.get_logger(__name__)

# Provider status code -> injury table key
INJURY_STATUS_KEYS = {
    "OUT": "out",
    "Doubtful": "doubtful",
    "Questionable": "questionable",
    "Probable": "probable",
    "Active": "healthy",
}

DEFAULT_INJURY_FACTORS: dict[str, float] = {
    "healthy": 1.0,
    "probable": 0.98,
    "day-to-day": 0.85,
    "questionable": 0.65,
    "doubtful": 0.30,
    "out": 0.0,
}

BASE_PLAYER_CONFIDENCE = 0.8
TEAM_CONFIDENCE = 0.75

# Combo stats derived after adjustments: key -> components
_DERIVED_STATS: dict[Sport, dict[str, tuple[str, ...]]] = {
    Sport.BASKETBALL: {
        "pra": ("points", "rebounds", "assists"),
        "pr": ("points", "rebounds"),
        "pa": ("points", "assists"),
        "ra": ("rebounds", "assists"),
        "stocks": ("steals", "blocks"),
    },
}


@dataclass
class ProjectionConfig:
    lookback_games: int = 10
    recency_weight: float = 1.5
    home_advantage: float = 0.03
    player_home_factor: float = 0.02
    min_confidence: float = 0.5
    injury_factors: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_INJURY_FACTORS))


def weighted_average(
    games: list[PlayerGameStats],
    stat_keys: list[str],
    recency_weight: float,
) -> dict[str, float]:
    """Recency-weighted mean per stat. games[0] is the most recent and gets recency_weight ** (n - 1)."""
    n = len(games)
    sums: dict[str, float] = {}
    total_weight = 0.0
    for i, game in enumerate(games):
        weight = recency_weight ** (n - i - 1)
        total_weight += weight
        for key in stat_keys:
            value = game.stats.get(key)
            if isinstance(value, (int, float)):
                sums[key] = sums.get(key, 0.0) + value * weight
    if total_weight == 0:
        return {}
    return {k: round(v / total_weight, 1) for k, v in sums.items()}


def _derive_combo_stats(stats: dict[str, float], sport: Sport) -> dict[str, float]:
    out = dict(stats)
    for key, components in _DERIVED_STATS.get(sport, {}).items():
        if all(c in stats for c in components):
            out[key] = round(sum(stats[c] for c in components), 1)
    if sport == Sport.ESPORTS and "kills" in stats and "assists" in stats:
        out["kda"] = round((stats["kills"] + stats["assists"]) / max(stats.get("deaths", 0.0), 1.0), 1)
    return out


class ProjectionEngine:
    """Generates per-game team and player projections for a league and date."""

    def __init__(self, providers: ProviderSet, config: ProjectionConfig | None = None):
        self.providers = providers
        self.config = config or ProjectionConfig()

    async def generate_projections(self, league: str, date: str) -> list[GameProjection]:
        """Project every scheduled game. One failing game or player never aborts the date."""
        game_date = validate_date(date)
        league = normalize_league(league)
        date = game_date.isoformat()

        try:
            games = await self.providers.schedule.get_games(date, league)
        except Exception as e:
            log.warning("schedule_unavailable", league=league, date=date, error=str(e))
            return []
        if not games:
            return []

        injuries = await self._injury_map(date, league)
        results = await asyncio.gather(
            *(self._project_game(game, league, date, injuries) for game in games),
            return_exceptions=True,
        )
        projections: list[GameProjection] = []
        for game, result in zip(games, results):
            if isinstance(result, BaseException):
                log.warning("skip_game", game_id=game.game_id, error=str(result))
                continue
            if result is not None:
                projections.append(result)
        log.info("projections_generated", league=league, date=date, games=len(projections))
        return projections

    async def _injury_map(self, date: str, league: str) -> dict[str, PlayerInjury]:
        try:
            report = await self.providers.injury.get_injury_report(date, league)
        except Exception as e:
            log.warning("injury_report_unavailable", league=league, date=date, error=str(e))
            return {}
        return {i.player_id: i for i in report}

    async def _project_game(
        self,
        game: GameInfo,
        league: str,
        date: str,
        injuries: dict[str, PlayerInjury],
    ) -> GameProjection | None:
        sport = sport_for_league(league)
        rosters = await self.providers.roster.get_rosters([game.game_id], league)
        roster = rosters.get(game.game_id)
        if roster is None:
            log.warning("roster_missing", game_id=game.game_id)
            return None

        try:
            team_stats = await self.providers.stats.get_historical_team_stats(
                [game.home_team_id, game.away_team_id], league
            )
        except Exception as e:
            log.warning("team_stats_unavailable", game_id=game.game_id, error=str(e))
            team_stats = {}

        home = self.project_team(game, sport, league, team_stats.get(game.home_team_id, {}), is_home=True)
        away = self.project_team(game, sport, league, team_stats.get(game.away_team_id, {}), is_home=False)

        eligible: list[tuple[RosterPlayer, str]] = []
        for player in roster:
            status = self._injury_status(player, injuries)
            if status == "out":
                continue
            eligible.append((player, status))

        history = await self._player_history([p.player_id for p, _ in eligible], league)
        players: list[PlayerProjection] = []
        for player, status in eligible:
            try:
                games = history.get(player.player_id)
                if games is None:
                    raise MissingPlayerStats(player.player_id)
                players.append(self.project_player(player, game, sport, league, games, status))
            except MissingPlayerStats:
                log.warning("skip_player", player_id=player.player_id, game_id=game.game_id, reason="missing_stats")

        return GameProjection(
            game_id=game.game_id,
            sport=sport.value,
            league=league,
            date=date,
            scheduled_time=game.scheduled_time,
            home_team=home,
            away_team=away,
            players=players,
            generated_at=datetime.now(timezone.utc),
        )

    async def _player_history(self, player_ids: list[str], league: str) -> dict[str, list[PlayerGameStats]]:
        """Fetch in one batch; on batch failure retry one player at a time and keep what succeeds."""
        if not player_ids:
            return {}
        lookback = self.config.lookback_games
        try:
            return await self.providers.stats.get_recent_player_stats(player_ids, league, lookback)
        except Exception as e:
            log.warning("player_stats_batch_failed", count=len(player_ids), error=str(e))
        out: dict[str, list[PlayerGameStats]] = {}
        for pid in player_ids:
            try:
                out.update(await self.providers.stats.get_recent_player_stats([pid], league, lookback))
            except Exception as e:
                log.warning("player_stats_unavailable", player_id=pid, error=str(e))
        return out

    @staticmethod
    def _injury_status(player: RosterPlayer, injuries: dict[str, PlayerInjury]) -> str:
        injury = injuries.get(player.player_id)
        if injury is None:
            return "healthy"
        return INJURY_STATUS_KEYS.get(injury.status, injury.status.lower())

    def project_team(
        self,
        game: GameInfo,
        sport: Sport,
        league: str,
        team_stats: dict[str, float],
        is_home: bool,
    ) -> TeamProjection:
        key, fallback = TEAM_SCORING_STAT[sport]
        base = float(team_stats.get(key, fallback))
        if is_home:
            factor = 1 + self.config.home_advantage
            adjustment = ProjectionAdjustment(kind="home_away", factor=factor, description="Home court/field advantage")
        else:
            factor = 1 - self.config.home_advantage
            adjustment = ProjectionAdjustment(kind="home_away", factor=factor, description="Away game penalty")
        score = base * factor
        return TeamProjection(
            team_id=game.home_team_id if is_home else game.away_team_id,
            team_name=game.home_team_name if is_home else game.away_team_name,
            game_id=game.game_id,
            sport=sport.value,
            league=league,
            projected_score=round(score, 1),
            projected_stats={**team_stats, "projected_score": score},
            confidence=TEAM_CONFIDENCE,
            adjustments=[adjustment],
        )

    def project_player(
        self,
        player: RosterPlayer,
        game: GameInfo,
        sport: Sport,
        league: str,
        games: list[PlayerGameStats],
        injury_status: str = "healthy",
    ) -> PlayerProjection:
        adjustments: list[ProjectionAdjustment] = []
        confidence = BASE_PLAYER_CONFIDENCE

        recent = games[: self.config.lookback_games]
        if recent:
            stats = weighted_average(recent, STAT_KEYS[sport], self.config.recency_weight)
        else:
            stats = dict(DEFAULT_PLAYER_STATS[sport])

        factor = self.config.injury_factors.get(injury_status)
        if factor is None:
            # Unrecognized status is not penalized.
            log.warning("unknown_injury_status", player_id=player.player_id, status=injury_status)
            factor = 1.0
        if factor < 1.0:
            adjustments.append(
                ProjectionAdjustment(kind="injury", factor=factor, description=f"Injury status: {injury_status}")
            )
            confidence *= factor
            stats = {k: v * factor for k, v in stats.items()}

        is_home = player.team_id == game.home_team_id
        home_factor = 1 + self.config.player_home_factor if is_home else 1 - self.config.player_home_factor
        adjustments.append(
            ProjectionAdjustment(
                kind="home_away",
                factor=home_factor,
                description="Home advantage" if is_home else "Away adjustment",
            )
        )
        stats = {k: round(v * home_factor, 1) for k, v in stats.items()}

        return PlayerProjection(
            player_id=player.player_id,
            player_name=player.player_name,
            team_id=player.team_id,
            game_id=game.game_id,
            sport=sport.value,
            league=league,
            position=player.position,
            injury_status=injury_status,
            projected_stats=_derive_combo_stats(stats, sport),
            confidence=max(self.config.min_confidence, confidence),
            adjustments=adjustments,
        )
