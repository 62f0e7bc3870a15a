"""Report subcommand: summary, reliability."""

import typer

from slipsmith.cli.common import run_with_service
from slipsmith.markets import format_market

app = typer.Typer(help="Evaluation summary and reliability ledger")


async def _summary(service, start: str, end: str):
    return service.get_summary(start, end)


async def _reliability(service, sport: str | None):
    return service.get_reliability_report(sport)


@app.command("summary")
def summary(
    ctx: typer.Context,
    start: str = typer.Option(..., "--start", help="First date (YYYY-MM-DD)"),
    end: str = typer.Option(..., "--end", help="Last date (YYYY-MM-DD)"),
) -> None:
    """Totals over evaluated events in a date range."""
    settings = ctx.obj["settings"]
    s = run_with_service(settings, lambda svc: _summary(svc, start, end))
    typer.echo(f"{start} .. {end}: {s.total} evaluated")
    typer.echo(f"  hits={s.hits} misses={s.misses} pushes={s.pushes} voids={s.voids}")
    typer.echo(f"  hit_rate={s.hit_rate:.1%} average_edge={s.average_edge:.2f}")


@app.command("reliability")
def reliability(
    ctx: typer.Context,
    sport: str | None = typer.Option(None, "--sport", "-s", help="Sport or league code"),
    limit: int = typer.Option(50, "--limit", "-n", help="Max rows to print"),
) -> None:
    """Reliability ledger, best hit rate first."""
    settings = ctx.obj["settings"]
    scores = run_with_service(settings, lambda svc: _reliability(svc, sport))
    for r in scores[:limit]:
        typer.echo(
            f"  {r.league:<8} {r.subject_id[:24]:<24} {format_market(r.market):<24} "
            f"{r.hit_rate:.1%}  bets={r.total_bets}"
        )
    typer.echo(f"Total: {len(scores)} entries")
