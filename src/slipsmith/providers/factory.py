"""Single selection point for provider implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from slipsmith.providers.base import ProviderSet
from slipsmith.providers.http import HttpDataProvider
from slipsmith.providers.mock import MockDataProvider

if TYPE_CHECKING:
    from slipsmith.config import Settings

log = structlog.get_logger(__name__)

PROVIDER_MODES = ("mock", "http")


def create_providers(settings: Settings) -> ProviderSet:
    """Build the provider set named by settings.provider_mode."""
    mode = settings.provider_mode
    if mode == "mock":
        p = MockDataProvider(seed=settings.mock_seed)
    elif mode == "http":
        p = HttpDataProvider(
            settings.provider_base_url,
            api_key=settings.provider_api_key,
            timeout=settings.provider_timeout_sec,
        )
    else:
        raise ValueError(f"Unknown provider mode: {mode!r}. Choose from: {list(PROVIDER_MODES)}")
    log.debug("providers_created", mode=mode)
    return ProviderSet(schedule=p, roster=p, stats=p, injury=p, odds=p, box_score=p, name=mode)
