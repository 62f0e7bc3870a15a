"""Data provider protocols and implementations."""

from slipsmith.providers.base import (
    BoxScoreProvider,
    InjuryProvider,
    OddsProvider,
    ProviderSet,
    RosterProvider,
    ScheduleProvider,
    StatsProvider,
)
from slipsmith.providers.factory import create_providers

__all__ = [
    "BoxScoreProvider",
    "InjuryProvider",
    "OddsProvider",
    "ProviderSet",
    "RosterProvider",
    "ScheduleProvider",
    "StatsProvider",
    "create_providers",
]
