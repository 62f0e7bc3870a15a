"""Provider protocols - the only way the core reaches schedules, rosters, stats, injuries, odds and box scores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from slipsmith.models import (
    BoxScore,
    ConsensusLine,
    GameInfo,
    PlayerGameStats,
    PlayerInjury,
    RosterPlayer,
)


class ScheduleProvider(Protocol):
    async def get_games(self, date: str, sport: str) -> list[GameInfo]: ...


class RosterProvider(Protocol):
    async def get_rosters(self, game_ids: list[str], sport: str) -> dict[str, list[RosterPlayer]]: ...


class StatsProvider(Protocol):
    async def get_recent_player_stats(
        self,
        player_ids: list[str],
        sport: str,
        lookback_games: int = 10,
    ) -> dict[str, list[PlayerGameStats]]:
        """playerId -> game lines, most recent first."""
        ...

    async def get_historical_team_stats(self, team_ids: list[str], sport: str) -> dict[str, dict[str, float]]: ...


class InjuryProvider(Protocol):
    async def get_injury_report(self, date: str, sport: str) -> list[PlayerInjury]: ...


class OddsProvider(Protocol):
    async def get_consensus_props(self, date: str, sport: str) -> list[ConsensusLine]: ...


class BoxScoreProvider(Protocol):
    async def get_box_score(self, game_id: str, sport: str) -> BoxScore | None:
        """Return None while the box score is not available."""
        ...


@dataclass
class ProviderSet:
    """One implementation per capability, chosen once at construction."""

    schedule: ScheduleProvider
    roster: RosterProvider
    stats: StatsProvider
    injury: InjuryProvider
    odds: OddsProvider
    box_score: BoxScoreProvider
    name: str = "custom"

    async def aclose(self) -> None:
        seen: set[int] = set()
        for p in (self.schedule, self.roster, self.stats, self.injury, self.odds, self.box_score):
            if id(p) in seen:
                continue
            seen.add(id(p))
            close = getattr(p, "aclose", None)
            if close is not None:
                await close()
