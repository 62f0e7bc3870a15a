"""Slip command: build and export the tiered slip for a league and date."""

import json
from pathlib import Path

import typer

from slipsmith.cli.common import run_with_service

app = typer.Typer(help="Build the tiered slip for a league and date")


@app.callback(invoke_without_command=True)
def slip(
    ctx: typer.Context,
    date: str = typer.Option(..., "--date", "-d", help="Game date (YYYY-MM-DD)"),
    sport: str = typer.Option(..., "--sport", "-s", help="League code, e.g. NBA"),
    tier: str = typer.Option("starter", "--tier", "-t", help="starter | pro | vip"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Requested event count (league minimum still applies)"),
    min_probability: float | None = typer.Option(
        None, "--min-probability", help="Probability floor (never below 0.60)"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write slip JSON to this file"),
) -> None:
    """Project, rank and select events; store them for later evaluation; print the slip JSON."""
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    result = run_with_service(
        settings,
        lambda s: s.get_top_events(date, sport, tier=tier, limit=limit, min_probability=min_probability),
    )
    text = json.dumps(result.to_export(), indent=2)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        typer.echo(f"Wrote {len(result.events)} events to {output}")
        if result.warning:
            typer.echo(f"Warning: {result.warning}")
    else:
        typer.echo(text)
