"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from slipsmith.config import get_settings
from slipsmith.config.settings import configure_logging

app = typer.Typer(
    name="slipsmith",
    help="SlipSmith - sports projections, edge ranking, evaluation ledger and tiered slips.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    configure_logging(settings)
    ctx.obj = {"settings": settings, "config_dir": config_dir, "profile": profile}


# Subcommands registered from other modules
from slipsmith.cli import api_cmd, evaluate, project, report, slip  # noqa: E402

app.add_typer(slip.app, name="slip")
app.add_typer(project.app, name="project")
app.add_typer(evaluate.app, name="evaluate")
app.add_typer(report.app, name="report")
app.add_typer(api_cmd.app, name="api")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
