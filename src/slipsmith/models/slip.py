"""Slip / SlipEvent - the exported artifact. Key names are a stable contract."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

SlipTier = Literal["starter", "pro", "vip"]


class SlipEvent(BaseModel):
    event_id: str
    game_id: str
    time: str
    player: str
    team: str
    market: str
    line: float
    direction: Literal["over", "under"]
    probability: str  # "83%"
    reasoning: str


class Slip(BaseModel):
    slip_id: str  # <SPORT>_<YYYY>_<MM>_<DD>_<TIER>
    date: str
    sport: str
    tier: SlipTier
    warning: str | None = None
    events: list[SlipEvent] = Field(default_factory=list)

    def to_export(self) -> dict[str, Any]:
        """Export JSON shape; `warning` omitted when unset."""
        return self.model_dump(exclude_none=True)
