"""Canonical schema (Pydantic) - games, lines, projections, events, slips."""

from slipsmith.models.event import (
    Direction,
    EvaluatedEvent,
    EvaluationSummary,
    Event,
    EventResult,
    ReliabilityScore,
)
from slipsmith.models.game import (
    BoxScore,
    ConsensusLine,
    GameInfo,
    PlayerGameStats,
    PlayerInjury,
    RosterPlayer,
)
from slipsmith.models.projection import (
    GameProjection,
    PlayerProjection,
    ProjectionAdjustment,
    TeamProjection,
)
from slipsmith.models.slip import Slip, SlipEvent, SlipTier

__all__ = [
    "BoxScore",
    "ConsensusLine",
    "Direction",
    "EvaluatedEvent",
    "EvaluationSummary",
    "Event",
    "EventResult",
    "GameInfo",
    "GameProjection",
    "PlayerGameStats",
    "PlayerInjury",
    "PlayerProjection",
    "ProjectionAdjustment",
    "ReliabilityScore",
    "RosterPlayer",
    "Slip",
    "SlipEvent",
    "SlipTier",
    "TeamProjection",
]
