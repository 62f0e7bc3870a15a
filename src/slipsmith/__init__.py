"""SlipSmith - projections, edge detection, evaluation ledger and tiered slips."""

__version__ = "0.1.0"
