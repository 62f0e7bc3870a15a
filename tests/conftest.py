"""Shared fixtures: temporary DuckDB, scripted providers, model builders."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
import structlog

from slipsmith.errors import ProviderUnavailable
from slipsmith.models import (
    BoxScore,
    ConsensusLine,
    Event,
    GameInfo,
    PlayerGameStats,
    PlayerInjury,
    RosterPlayer,
)
from slipsmith.providers import ProviderSet
from slipsmith.storage.db import get_connection, init_schema


@pytest.fixture(autouse=True)
def _reset_structlog():
    # CLI tests configure structlog against the runner's (later closed) stderr.
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_db():
    tmp = tempfile.mkdtemp()
    path = Path(tmp) / "test.duckdb"
    conn = get_connection(path)
    init_schema(conn)
    yield conn
    conn.close()
    path.unlink(missing_ok=True)
    Path(tmp).rmdir()


class ScriptedProvider:
    """In-memory provider; set *_error to make a call raise."""

    def __init__(self):
        self.games: list[GameInfo] = []
        self.rosters: dict[str, list[RosterPlayer]] = {}
        self.player_stats: dict[str, list[PlayerGameStats]] = {}
        self.team_stats: dict[str, dict[str, float]] = {}
        self.injuries: list[PlayerInjury] = []
        self.lines: list[ConsensusLine] = []
        self.box_scores: dict[str, BoxScore | None] = {}
        self.schedule_error: Exception | None = None
        self.stats_error: Exception | None = None
        self.stats_failing_ids: set[str] = set()
        self.box_score_error: Exception | None = None
        self.box_score_calls: list[str] = []

    async def get_games(self, date, sport):
        if self.schedule_error:
            raise self.schedule_error
        return list(self.games)

    async def get_rosters(self, game_ids, sport):
        return {g: self.rosters[g] for g in game_ids if g in self.rosters}

    async def get_recent_player_stats(self, player_ids, sport, lookback_games=10):
        if self.stats_error:
            raise self.stats_error
        failing = self.stats_failing_ids.intersection(player_ids)
        if failing:
            raise ProviderUnavailable(f"stats unavailable for {sorted(failing)}")
        return {p: self.player_stats[p][:lookback_games] for p in player_ids if p in self.player_stats}

    async def get_historical_team_stats(self, team_ids, sport):
        return {t: self.team_stats[t] for t in team_ids if t in self.team_stats}

    async def get_injury_report(self, date, sport):
        return list(self.injuries)

    async def get_consensus_props(self, date, sport):
        return list(self.lines)

    async def get_box_score(self, game_id, sport):
        self.box_score_calls.append(game_id)
        if self.box_score_error:
            raise self.box_score_error
        return self.box_scores.get(game_id)

    def as_set(self) -> ProviderSet:
        return ProviderSet(schedule=self, roster=self, stats=self, injury=self, odds=self, box_score=self, name="scripted")


@pytest.fixture
def scripted():
    return ScriptedProvider()


def make_game(game_id="NBA_20250115_1", home="H", away="A") -> GameInfo:
    return GameInfo(
        game_id=game_id,
        sport="NBA",
        home_team_id=home,
        home_team_name=f"Home {home}",
        away_team_id=away,
        away_team_name=f"Away {away}",
        scheduled_time=datetime(2025, 1, 16, 0, 30, tzinfo=timezone.utc),
    )


def make_event(
    *,
    event_id="e1",
    date="2025-01-15",
    game_id="NBA_20250115_1",
    player_id="H-P0",
    player_name="Jalen Reed",
    team_id="H",
    team_name="Home H",
    market="POINTS",
    line=25.5,
    direction="over",
    probability=0.7,
    edge_score=6.0,
    reliability=None,
) -> Event:
    return Event(
        event_id=event_id,
        date=date,
        sport="basketball",
        league="NBA",
        game_id=game_id,
        player_id=player_id,
        player_name=player_name,
        team_id=team_id,
        team_name=team_name,
        market=market,
        line=line,
        direction=direction,
        model_projection=line + (3 if direction == "over" else -3),
        probability=probability,
        edge_score=edge_score,
        reasoning="test",
        reliability=reliability,
        confidence=0.8,
    )
