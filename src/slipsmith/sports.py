"""Sport / league registry, date validation and per-sport stat baselines."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from slipsmith.errors import InvalidDateFormat, UnknownLeague


class Sport(str, Enum):
    BASKETBALL = "basketball"
    FOOTBALL = "football"
    SOCCER = "soccer"
    ESPORTS = "esports"


LEAGUES: dict[str, Sport] = {
    "NBA": Sport.BASKETBALL,
    "WNBA": Sport.BASKETBALL,
    "NFL": Sport.FOOTBALL,
    "NCAA_FB": Sport.FOOTBALL,
    "EPL": Sport.SOCCER,
    "LA_LIGA": Sport.SOCCER,
    "BUNDESLIGA": Sport.SOCCER,
    "SERIE_A": Sport.SOCCER,
    "LIGUE_1": Sport.SOCCER,
    "MLS": Sport.SOCCER,
    "UEFA_CL": Sport.SOCCER,
    "LOL": Sport.ESPORTS,
    "CSGO": Sport.ESPORTS,
    "VALORANT": Sport.ESPORTS,
    "DOTA2": Sport.ESPORTS,
}

STAT_KEYS: dict[Sport, list[str]] = {
    Sport.BASKETBALL: [
        "points", "rebounds", "assists", "steals", "blocks", "turnovers",
        "threes_made", "field_goals_made", "free_throws_made", "minutes",
    ],
    Sport.FOOTBALL: [
        "passing_yards", "passing_touchdowns", "interceptions", "rushing_yards",
        "rushing_touchdowns", "receiving_yards", "receiving_touchdowns", "receptions", "targets",
    ],
    Sport.SOCCER: [
        "goals", "assists", "shots", "shots_on_target", "key_passes", "tackles", "interceptions",
    ],
    Sport.ESPORTS: [
        "kills", "deaths", "assists", "cs", "gold", "damage_dealt", "vision_score",
    ],
}

# Baselines for players with no game history (rookies, call-ups).
DEFAULT_PLAYER_STATS: dict[Sport, dict[str, float]] = {
    Sport.BASKETBALL: {
        "points": 8.0, "rebounds": 3.0, "assists": 2.0, "steals": 0.5, "blocks": 0.3,
        "turnovers": 1.0, "threes_made": 0.5, "minutes": 15.0,
    },
    Sport.FOOTBALL: {
        "passing_yards": 0.0, "rushing_yards": 20.0, "receiving_yards": 30.0, "receptions": 2.0,
    },
    Sport.SOCCER: {
        "goals": 0.1, "assists": 0.1, "shots": 1.0, "shots_on_target": 0.3,
    },
    Sport.ESPORTS: {
        "kills": 3.0, "deaths": 3.0, "assists": 4.0, "cs": 180.0,
    },
}

# (team stat key, fallback per-game value) for the primary scoring stat.
TEAM_SCORING_STAT: dict[Sport, tuple[str, float]] = {
    Sport.BASKETBALL: ("points_per_game", 110.0),
    Sport.FOOTBALL: ("points_per_game", 22.0),
    Sport.SOCCER: ("goals_per_game", 1.5),
    Sport.ESPORTS: ("kills_per_game", 15.0),
}

DATE_FORMAT = "%Y-%m-%d"


def normalize_league(code: str | None) -> str:
    """Upper-case and validate a league code. Raises UnknownLeague."""
    league = (code or "").strip().upper()
    if league not in LEAGUES:
        raise UnknownLeague(code)
    return league


def sport_for_league(code: str | None) -> Sport:
    return LEAGUES[normalize_league(code)]


def leagues_for_sport(sport: Sport) -> list[str]:
    return [league for league, s in LEAGUES.items() if s == sport]


def supported_sports() -> dict[str, list[str]]:
    """Return {sport: [leagues]} for every registered sport."""
    return {s.value: leagues_for_sport(s) for s in Sport}


def validate_date(value: str | date | None) -> date:
    """Parse a strict YYYY-MM-DD string. Raises InvalidDateFormat."""
    if isinstance(value, date):
        return value
    s = (value or "").strip() if isinstance(value, str) else ""
    if len(s) != 10:
        raise InvalidDateFormat(value)
    try:
        return datetime.strptime(s, DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidDateFormat(value) from e
