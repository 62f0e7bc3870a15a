"""slipsmith command-line interface (typer)."""
