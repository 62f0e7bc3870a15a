"""Shared helpers for CLI commands: service lifecycle and error exit."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer

from slipsmith.config import Settings
from slipsmith.engine.slip import SlipService
from slipsmith.errors import SlipSmithError

T = TypeVar("T")


def run_with_service(settings: Settings, fn: Callable[[SlipService], Awaitable[T]]) -> T:
    """Open a service, run fn inside one event loop, always close. SlipSmithError -> exit 1."""

    async def _main() -> T:
        service = SlipService.from_settings(settings)
        try:
            return await fn(service)
        finally:
            await service.close()

    try:
        return asyncio.run(_main())
    except SlipSmithError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
