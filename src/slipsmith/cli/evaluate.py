"""Evaluate command: score pending events for a date against final box scores."""

import typer

from slipsmith.cli.common import run_with_service
from slipsmith.models import EvaluationSummary

app = typer.Typer(help="Evaluate stored events for a date")


@app.callback(invoke_without_command=True)
def evaluate(
    ctx: typer.Context,
    date: str = typer.Option(..., "--date", "-d", help="Game date (YYYY-MM-DD)"),
) -> None:
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    evaluated = run_with_service(settings, lambda s: s.evaluate_date(date))
    summary = EvaluationSummary.from_results(evaluated)
    typer.echo(
        f"Evaluated {summary.total} events: {summary.hits} hit, {summary.misses} miss, "
        f"{summary.pushes} push, {summary.voids} void"
    )
    if summary.hits + summary.misses:
        typer.echo(f"Hit rate: {summary.hit_rate:.1%}")
