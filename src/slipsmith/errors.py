"""Error types for projection, evaluation and slip flows."""

from __future__ import annotations


class SlipSmithError(RuntimeError):
    """Base error for SlipSmith operations."""


class InvalidDateFormat(SlipSmithError, ValueError):
    """Date is not a real YYYY-MM-DD calendar date."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid date format: {value!r}. Use YYYY-MM-DD.")
        self.value = value


class UnknownLeague(SlipSmithError, ValueError):
    """League / sport code is not registered."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unknown sport/league: {value!r}")
        self.value = value


class ProviderUnavailable(SlipSmithError):
    """A data provider call failed (network, upstream error, bad payload)."""


class MissingPlayerStats(SlipSmithError):
    """Stats provider returned nothing for a player."""


class GameNotFinal(SlipSmithError):
    """Box score requested for a game that has not reached a final state."""


class PersistenceFailure(SlipSmithError):
    """Ledger read/write failed; ledger state may be inconsistent."""
