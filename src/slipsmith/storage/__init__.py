"""DuckDB persistence: events, evaluations, reliability ledger."""

from slipsmith.storage.db import get_connection, init_schema

__all__ = ["get_connection", "init_schema"]
