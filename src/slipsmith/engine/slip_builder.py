"""Deterministic ids and the Event -> SlipEvent / Slip export projection."""

from __future__ import annotations

import re

from slipsmith.markets import format_market
from slipsmith.models import Event, Slip, SlipEvent, SlipTier

TIERS: tuple[SlipTier, ...] = ("starter", "pro", "vip")

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _slug(value: str) -> str:
    return _NON_ALNUM.sub("_", value.lower()).strip("_")


def _compact_date(date: str) -> str:
    return date.replace("-", "")


def build_slip_id(sport: str, date: str, tier: str) -> str:
    """<SPORT>_<YYYY>_<MM>_<DD>_<TIER>, e.g. NBA_2025_01_15_STARTER."""
    return f"{sport}_{date.replace('-', '_')}_{tier}".upper()


def build_event_id(
    sport: str,
    game_id: str,
    subject: str,
    market: str,
    line: float,
    direction: str,
    date: str,
) -> str:
    """Same inputs always produce the same id. subject is the player, team or game id."""
    line_part = f"{line:g}".replace(".", "_").replace("-", "m")
    market_key = re.sub(r"[^a-z0-9]", "", market.lower())
    parts = [
        sport.lower(),
        _slug(game_id),
        _slug(subject),
        f"{market_key}{line_part}",
        direction.lower(),
        _compact_date(date),
    ]
    return "_".join(parts)


def format_probability(probability: float) -> str:
    return f"{round(probability * 100)}%"


def is_valid_tier(tier: str) -> bool:
    return (tier or "").lower() in TIERS


def normalize_tier(tier: str | None) -> SlipTier:
    """Unknown or missing tier falls back to starter."""
    value = (tier or "").lower()
    for t in TIERS:
        if t == value:
            return t
    return "starter"


def to_slip_event(event: Event) -> SlipEvent:
    return SlipEvent(
        event_id=event.event_id,
        game_id=event.game_id,
        time=event.game_time.isoformat() if event.game_time else "TBD",
        player=event.player_name or event.team_name or "",
        team=event.team_name or "",
        market=format_market(event.market),
        line=event.line,
        direction=event.direction,
        probability=format_probability(event.probability),
        reasoning=event.reasoning,
    )


def build_slip(
    events: list[Event],
    sport: str,
    date: str,
    tier: str,
    warning: str | None = None,
) -> Slip:
    tier_value = normalize_tier(tier)
    return Slip(
        slip_id=build_slip_id(sport, date, tier_value),
        date=date,
        sport=sport.upper(),
        tier=tier_value,
        warning=warning,
        events=[to_slip_event(e) for e in events],
    )
