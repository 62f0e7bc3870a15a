"""Team, player and game projections - ephemeral, recomputed each run."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

AdjustmentKind = Literal["injury", "matchup", "pace", "rest", "home_away", "weather", "trend"]


class ProjectionAdjustment(BaseModel):
    kind: AdjustmentKind
    factor: float  # multiplier, 1.0 = no change
    description: str


class TeamProjection(BaseModel):
    team_id: str
    team_name: str
    game_id: str
    sport: str
    league: str
    projected_score: float
    projected_stats: dict[str, float] = Field(default_factory=dict)
    confidence: float = Field(0.75, ge=0, le=1)
    adjustments: list[ProjectionAdjustment] = Field(default_factory=list)


class PlayerProjection(BaseModel):
    player_id: str
    player_name: str
    team_id: str
    game_id: str
    sport: str
    league: str
    position: str = ""
    injury_status: str = "healthy"
    projected_stats: dict[str, float] = Field(default_factory=dict)
    confidence: float = Field(..., ge=0, le=1)
    adjustments: list[ProjectionAdjustment] = Field(default_factory=list)

    def adjustment(self, kind: str) -> ProjectionAdjustment | None:
        for a in self.adjustments:
            if a.kind == kind:
                return a
        return None


class GameProjection(BaseModel):
    game_id: str
    sport: str
    league: str
    date: str
    scheduled_time: datetime | None = None
    home_team: TeamProjection
    away_team: TeamProjection
    players: list[PlayerProjection] = Field(default_factory=list)
    generated_at: datetime
