"""Project command: per-game projection counts for a league and date."""

import typer

from slipsmith.cli.common import run_with_service

app = typer.Typer(help="Generate projections for a league and date")


@app.callback(invoke_without_command=True)
def project(
    ctx: typer.Context,
    date: str = typer.Option(..., "--date", "-d", help="Game date (YYYY-MM-DD)"),
    league: str = typer.Option(..., "--league", "-l", help="League code, e.g. NBA"),
) -> None:
    if ctx.invoked_subcommand is not None:
        return
    settings = ctx.obj["settings"]
    games = run_with_service(settings, lambda s: s.get_projections(league, date))
    for g in games:
        typer.echo(
            f"  {g.game_id}  {g.away_team.team_name} {g.away_team.projected_score:.1f} @ "
            f"{g.home_team.team_name} {g.home_team.projected_score:.1f}  players={len(g.players)}"
        )
    typer.echo(f"Total: {len(games)} games")
