"""GameInfo, RosterPlayer, PlayerInjury, stats, ConsensusLine, BoxScore - provider records."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

GameStatus = Literal["scheduled", "in_progress", "final", "postponed", "cancelled"]
InjuryStatusCode = Literal["OUT", "Questionable", "Doubtful", "Probable", "Active"]

_INJURY_CODES = {
    "OUT": "OUT",
    "O": "OUT",
    "Q": "Questionable",
    "QUESTIONABLE": "Questionable",
    "D": "Doubtful",
    "DOUBTFUL": "Doubtful",
    "P": "Probable",
    "PROBABLE": "Probable",
    "ACTIVE": "Active",
}


class GameInfo(BaseModel):
    """Scheduled game from the schedule provider. Immutable within a run."""

    model_config = {"frozen": True}

    game_id: str
    sport: str  # league code, e.g. NBA
    home_team_id: str
    home_team_name: str
    home_team_abbreviation: str = ""
    away_team_id: str
    away_team_name: str
    away_team_abbreviation: str = ""
    scheduled_time: datetime
    venue: str | None = None
    status: GameStatus = "scheduled"


class RosterPlayer(BaseModel):
    """Player on a game roster (both teams combined per game)."""

    player_id: str
    player_name: str
    team_id: str
    team_name: str = ""
    position: str = ""
    jersey_number: str | None = None
    is_active: bool = True


class PlayerInjury(BaseModel):
    """Injury report entry."""

    player_id: str
    player_name: str = ""
    team_id: str = ""
    status: InjuryStatusCode
    injury_type: str | None = None
    notes: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: object) -> object:
        if isinstance(v, str):
            return _INJURY_CODES.get(v.strip().upper(), v)
        return v


class PlayerGameStats(BaseModel):
    """One historical game line for a player."""

    player_id: str
    game_id: str = ""
    date: str = ""
    stats: dict[str, float] = Field(default_factory=dict)


class ConsensusLine(BaseModel):
    """Consensus market quote. Player props carry player_id; team props carry team_id only."""

    market_id: str = ""
    game_id: str
    sport: str  # league code
    player_id: str | None = None
    player_name: str | None = None
    team_id: str | None = None
    team_name: str | None = None
    market: str
    line: float
    over_odds: int | None = None
    under_odds: int | None = None
    source: str | None = "consensus"


class BoxScore(BaseModel):
    """Final (or partial) box score for evaluation."""

    game_id: str
    status: GameStatus = "final"
    home_team_id: str
    away_team_id: str
    home_score: float
    away_score: float
    # player_id -> stat key -> value
    player_stats: dict[str, dict[str, float]] = Field(default_factory=dict)

    @property
    def is_final(self) -> bool:
        return self.status == "final"
