"""Event (an edge), EvaluatedEvent, ReliabilityScore, EvaluationSummary."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Direction = Literal["over", "under"]
EventResult = Literal["hit", "miss", "push", "void"]


class Event(BaseModel):
    """One market decision produced by the edge detector."""

    event_id: str
    date: str
    sport: str
    league: str
    game_id: str
    game_time: datetime | None = None
    player_id: str | None = None
    player_name: str | None = None
    team_id: str | None = None
    team_name: str | None = None
    market: str
    line: float
    direction: Direction
    model_projection: float
    probability: float = Field(..., ge=0, le=1)
    edge_score: float
    reasoning: str = ""
    reliability: float | None = Field(None, ge=0, le=1)
    confidence: float = Field(0.5, ge=0, le=1)

    @property
    def subject_id(self) -> str:
        """Player id for player props, team id (or game id for game totals) otherwise."""
        return self.player_id or self.team_id or self.game_id


class EvaluatedEvent(Event):
    actual_value: float | None = None
    result: EventResult
    evaluated_at: datetime


class ReliabilityScore(BaseModel):
    """Rolling aggregate per (sport, league, subject, market)."""

    sport: str
    league: str
    subject_id: str
    subject_kind: Literal["player", "team", "game"] = "player"
    market: str
    total_bets: int = 0  # decided bets: hits + misses + pushes
    hits: int = 0
    misses: int = 0
    pushes: int = 0
    voids: int = 0
    hit_rate: float = 0.0
    average_edge: float = 0.0
    last_updated: datetime | None = None

    @property
    def evaluated_count(self) -> int:
        return self.total_bets + self.voids

    def record(self, result: EventResult, edge_score: float, at: datetime | None = None) -> ReliabilityScore:
        """Return a copy with one more evaluated result folded in."""
        hits = self.hits + (result == "hit")
        misses = self.misses + (result == "miss")
        pushes = self.pushes + (result == "push")
        voids = self.voids + (result == "void")
        total = self.total_bets + (result != "void")
        decided = hits + misses
        n = self.evaluated_count
        return self.model_copy(
            update={
                "total_bets": total,
                "hits": hits,
                "misses": misses,
                "pushes": pushes,
                "voids": voids,
                "hit_rate": hits / decided if decided else 0.0,
                "average_edge": (self.average_edge * n + edge_score) / (n + 1),
                "last_updated": at or datetime.now(),
            }
        )


class EvaluationSummary(BaseModel):
    total: int = 0
    hits: int = 0
    misses: int = 0
    pushes: int = 0
    voids: int = 0
    hit_rate: float = 0.0
    average_edge: float = 0.0

    @classmethod
    def from_results(cls, evaluated: list[EvaluatedEvent]) -> EvaluationSummary:
        counts = {r: sum(1 for e in evaluated if e.result == r) for r in ("hit", "miss", "push", "void")}
        decided = counts["hit"] + counts["miss"]
        return cls(
            total=len(evaluated),
            hits=counts["hit"],
            misses=counts["miss"],
            pushes=counts["push"],
            voids=counts["void"],
            hit_rate=counts["hit"] / decided if decided else 0.0,
            average_edge=(sum(e.edge_score for e in evaluated) / len(evaluated)) if evaluated else 0.0,
        )
