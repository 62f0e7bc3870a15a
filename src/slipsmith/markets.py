"""Market codes: projection stat key, variance threshold and display name per market."""

from __future__ import annotations

from dataclasses import dataclass

from slipsmith.sports import Sport

TEAM_TOTAL = "TEAM_TOTAL"
GAME_TOTAL = "GAME_TOTAL"
TEAM_MARKETS = frozenset({TEAM_TOTAL, GAME_TOTAL})


@dataclass(frozen=True)
class MarketSpec:
    """One player-prop market."""

    code: str
    stat_key: str
    threshold: float  # sport-calibrated std-dev-like spread used to normalize the edge
    display: str
    components: tuple[str, ...] = ()  # box-score stats summed for combo markets


_SPECS = [
    # Basketball
    MarketSpec("POINTS", "points", 4.0, "points"),
    MarketSpec("REBOUNDS", "rebounds", 2.5, "rebounds"),
    MarketSpec("ASSISTS", "assists", 1.5, "assists"),
    MarketSpec("THREES", "threes_made", 1.0, "threes"),
    MarketSpec("BLOCKS", "blocks", 0.8, "blocks"),
    MarketSpec("STEALS", "steals", 0.8, "steals"),
    MarketSpec("TURNOVERS", "turnovers", 1.0, "turnovers"),
    MarketSpec("STOCKS", "stocks", 1.2, "stocks", ("steals", "blocks")),
    MarketSpec("PRA", "pra", 6.0, "points+rebounds+assists", ("points", "rebounds", "assists")),
    MarketSpec("PR", "pr", 5.0, "points+rebounds", ("points", "rebounds")),
    MarketSpec("PA", "pa", 5.0, "points+assists", ("points", "assists")),
    MarketSpec("RA", "ra", 3.0, "rebounds+assists", ("rebounds", "assists")),
    # Football
    MarketSpec("PASSING_YARDS", "passing_yards", 35.0, "passing yards"),
    MarketSpec("RUSHING_YARDS", "rushing_yards", 20.0, "rushing yards"),
    MarketSpec("RECEIVING_YARDS", "receiving_yards", 20.0, "receiving yards"),
    MarketSpec("RECEPTIONS", "receptions", 1.5, "receptions"),
    MarketSpec("PASSING_TDS", "passing_touchdowns", 0.7, "passing touchdowns"),
    MarketSpec("RUSHING_TDS", "rushing_touchdowns", 0.5, "rushing touchdowns"),
    MarketSpec("RECEIVING_TDS", "receiving_touchdowns", 0.5, "receiving touchdowns"),
    MarketSpec("INTERCEPTIONS", "interceptions", 0.5, "interceptions"),
    # Soccer
    MarketSpec("GOALS", "goals", 0.3, "goals"),
    MarketSpec("SOCCER_ASSISTS", "assists", 0.3, "assists"),
    MarketSpec("SHOTS", "shots", 1.0, "shots"),
    MarketSpec("SHOTS_ON_TARGET", "shots_on_target", 0.7, "shots on target"),
    MarketSpec("TACKLES", "tackles", 1.0, "tackles"),
    # Esports
    MarketSpec("KILLS", "kills", 2.0, "kills"),
    MarketSpec("DEATHS", "deaths", 1.5, "deaths"),
    MarketSpec("ESPORTS_ASSISTS", "assists", 2.0, "assists"),
    MarketSpec("CS", "cs", 25.0, "creep score"),
    MarketSpec("KDA", "kda", 1.0, "kda"),
]

MARKETS: dict[str, MarketSpec] = {m.code: m for m in _SPECS}

# Provider prop codes (odds feeds use lowercase names) -> internal code
_ALIASES: dict[str, str] = {
    "points": "POINTS",
    "rebounds": "REBOUNDS",
    "assists": "ASSISTS",
    "threes": "THREES",
    "blocks": "BLOCKS",
    "steals": "STEALS",
    "turnovers": "TURNOVERS",
    "blocks+steals": "STOCKS",
    "points+rebounds": "PR",
    "points+assists": "PA",
    "rebounds+assists": "RA",
    "points+rebounds+assists": "PRA",
    "passing_yards": "PASSING_YARDS",
    "rushing_yards": "RUSHING_YARDS",
    "receiving_yards": "RECEIVING_YARDS",
    "receptions": "RECEPTIONS",
    "passing_touchdowns": "PASSING_TDS",
    "rushing_touchdowns": "RUSHING_TDS",
    "receiving_touchdowns": "RECEIVING_TDS",
    "interceptions": "INTERCEPTIONS",
    "goals": "GOALS",
    "soccer_assists": "SOCCER_ASSISTS",
    "shots": "SHOTS",
    "shots_on_target": "SHOTS_ON_TARGET",
    "kills": "KILLS",
    "deaths": "DEATHS",
    "esports_assists": "ESPORTS_ASSISTS",
    "team_total": TEAM_TOTAL,
    "game_total": GAME_TOTAL,
    "spread": "SPREAD",
    "moneyline": "MONEYLINE",
}

_TEAM_THRESHOLDS: dict[Sport, float] = {
    Sport.BASKETBALL: 5.0,
    Sport.SOCCER: 0.5,
}
_DEFAULT_TEAM_THRESHOLD = 3.0

_EXTRA_DISPLAY = {
    TEAM_TOTAL: "team total",
    GAME_TOTAL: "game total",
    "SPREAD": "spread",
    "MONEYLINE": "moneyline",
}


def normalize_market(code: str) -> str:
    """Resolve a provider or internal market code to the internal upper-case code."""
    raw = (code or "").strip()
    if raw.lower() in _ALIASES:
        return _ALIASES[raw.lower()]
    return raw.upper()


def get_market(code: str) -> MarketSpec | None:
    """Return the player-prop spec for a code, or None when the market is not modelled."""
    return MARKETS.get(normalize_market(code))


def team_threshold(sport: Sport | str) -> float:
    return _TEAM_THRESHOLDS.get(Sport(sport), _DEFAULT_TEAM_THRESHOLD)


def format_market(code: str) -> str:
    """Human-readable market name, e.g. PR -> 'points+rebounds'."""
    internal = normalize_market(code)
    spec = MARKETS.get(internal)
    if spec is not None:
        return spec.display
    return _EXTRA_DISPLAY.get(internal, internal.lower().replace("_", " "))
