"""Deterministic generated data for demos and tests. Same (seed, date, league) -> same data."""

from __future__ import annotations

import hashlib
import random
from datetime import datetime, timedelta, timezone

from slipsmith.markets import GAME_TOTAL, TEAM_TOTAL
from slipsmith.models import (
    BoxScore,
    ConsensusLine,
    GameInfo,
    PlayerGameStats,
    PlayerInjury,
    RosterPlayer,
)
from slipsmith.sports import Sport, sport_for_league

_TEAM_NAMES = [
    "Hawks", "Comets", "Pilots", "Rangers", "Tide", "Wolves", "Storm", "Miners",
    "Falcons", "Giants", "Owls", "Knights", "Bears", "Sharks", "Lions", "Vipers",
]
_FIRST = ["Jalen", "Marcus", "Devin", "Tyler", "Chris", "Luka", "Andre", "Kofi", "Noah", "Sam"]
_LAST = ["Reed", "Carter", "Okafor", "Silva", "Mason", "Brooks", "Novak", "Hayes", "Ward", "Lopez"]

_POSITIONS: dict[Sport, list[str]] = {
    Sport.BASKETBALL: ["G", "G", "F", "F", "C", "G", "F", "C"],
    Sport.FOOTBALL: ["QB", "RB", "WR", "WR", "TE", "RB", "WR"],
    Sport.SOCCER: ["FW", "FW", "MF", "MF", "MF", "DF", "DF"],
    Sport.ESPORTS: ["TOP", "JNG", "MID", "ADC", "SUP"],
}

# Per-position per-game means used to generate stat lines
_PROFILES: dict[Sport, dict[str, dict[str, float]]] = {
    Sport.BASKETBALL: {
        "G": {"points": 18, "rebounds": 4, "assists": 6, "steals": 1.2, "blocks": 0.3, "turnovers": 2.5, "threes_made": 2.5, "minutes": 32},
        "F": {"points": 15, "rebounds": 7, "assists": 3, "steals": 0.9, "blocks": 0.8, "turnovers": 1.8, "threes_made": 1.5, "minutes": 30},
        "C": {"points": 12, "rebounds": 10, "assists": 2, "steals": 0.6, "blocks": 1.6, "turnovers": 1.6, "threes_made": 0.3, "minutes": 27},
    },
    Sport.FOOTBALL: {
        "QB": {"passing_yards": 245, "passing_touchdowns": 1.7, "interceptions": 0.8, "rushing_yards": 18},
        "RB": {"rushing_yards": 68, "rushing_touchdowns": 0.5, "receiving_yards": 22, "receptions": 2.8},
        "WR": {"receiving_yards": 62, "receptions": 5.0, "receiving_touchdowns": 0.4, "targets": 7.5},
        "TE": {"receiving_yards": 41, "receptions": 3.8, "receiving_touchdowns": 0.3, "targets": 5.5},
    },
    Sport.SOCCER: {
        "FW": {"goals": 0.45, "assists": 0.2, "shots": 3.1, "shots_on_target": 1.3},
        "MF": {"goals": 0.15, "assists": 0.25, "shots": 1.6, "shots_on_target": 0.6, "key_passes": 1.8, "tackles": 1.9},
        "DF": {"goals": 0.05, "assists": 0.08, "shots": 0.6, "tackles": 2.6, "interceptions": 1.4},
    },
    Sport.ESPORTS: {
        "TOP": {"kills": 3.2, "deaths": 2.8, "assists": 5.0, "cs": 240},
        "JNG": {"kills": 3.6, "deaths": 3.0, "assists": 7.2, "cs": 170},
        "MID": {"kills": 4.4, "deaths": 2.6, "assists": 5.6, "cs": 265},
        "ADC": {"kills": 5.1, "deaths": 2.4, "assists": 5.0, "cs": 290},
        "SUP": {"kills": 0.9, "deaths": 3.1, "assists": 10.5, "cs": 35},
    },
}

_TEAM_SCORING: dict[Sport, tuple[str, float, float]] = {
    Sport.BASKETBALL: ("points_per_game", 112.0, 7.0),
    Sport.FOOTBALL: ("points_per_game", 22.0, 5.0),
    Sport.SOCCER: ("goals_per_game", 1.4, 0.4),
    Sport.ESPORTS: ("kills_per_game", 15.0, 4.0),
}

_PROP_MARKETS: dict[Sport, dict[str, str]] = {
    Sport.BASKETBALL: {"points": "points", "rebounds": "rebounds", "assists": "assists", "threes_made": "threes"},
    Sport.FOOTBALL: {
        "passing_yards": "passing_yards",
        "rushing_yards": "rushing_yards",
        "receiving_yards": "receiving_yards",
        "receptions": "receptions",
    },
    Sport.SOCCER: {"shots": "shots", "shots_on_target": "shots_on_target"},
    Sport.ESPORTS: {"kills": "kills", "deaths": "deaths"},
}


def _rng(*parts: object) -> random.Random:
    key = "|".join(str(p) for p in parts)
    return random.Random(int(hashlib.sha256(key.encode()).hexdigest()[:16], 16))


def _game_date(game_id: str) -> str:
    # Mock ids look like <LEAGUE>_<YYYYMMDD>_<n>
    parts = game_id.split("_")
    raw = parts[-2] if len(parts) >= 3 else "19700101"
    return f"{raw[:4]}-{raw[4:6]}-{raw[6:8]}"


def _profile(sport: Sport, position: str) -> dict[str, float]:
    profiles = _PROFILES[sport]
    return profiles.get(position) or next(iter(profiles.values()))


class MockDataProvider:
    """Implements every provider protocol from one seeded generator."""

    def __init__(self, seed: int = 7, games_per_day: int = 4) -> None:
        self.seed = seed
        self.games_per_day = games_per_day

    # --- schedule ---
    async def get_games(self, date: str, sport: str) -> list[GameInfo]:
        league = sport.upper()
        rng = _rng(self.seed, "schedule", league, date)
        teams = list(range(len(_TEAM_NAMES)))
        rng.shuffle(teams)
        start = datetime.fromisoformat(date).replace(hour=23, tzinfo=timezone.utc)
        games = []
        for n in range(self.games_per_day):
            home, away = teams[2 * n], teams[2 * n + 1]
            games.append(
                GameInfo(
                    game_id=f"{league}_{date.replace('-', '')}_{n + 1}",
                    sport=league,
                    home_team_id=f"{league}-T{home}",
                    home_team_name=_TEAM_NAMES[home],
                    home_team_abbreviation=_TEAM_NAMES[home][:3].upper(),
                    away_team_id=f"{league}-T{away}",
                    away_team_name=_TEAM_NAMES[away],
                    away_team_abbreviation=_TEAM_NAMES[away][:3].upper(),
                    scheduled_time=start + timedelta(minutes=30 * n),
                    status="scheduled",
                )
            )
        return games

    def _game(self, game_id: str, league: str) -> GameInfo | None:
        rng = _rng(self.seed, "schedule", league, _game_date(game_id))
        teams = list(range(len(_TEAM_NAMES)))
        rng.shuffle(teams)
        try:
            n = int(game_id.split("_")[-1]) - 1
        except ValueError:
            return None
        if not 0 <= n < self.games_per_day:
            return None
        home, away = teams[2 * n], teams[2 * n + 1]
        return GameInfo(
            game_id=game_id,
            sport=league,
            home_team_id=f"{league}-T{home}",
            home_team_name=_TEAM_NAMES[home],
            away_team_id=f"{league}-T{away}",
            away_team_name=_TEAM_NAMES[away],
            scheduled_time=datetime.fromisoformat(_game_date(game_id)).replace(tzinfo=timezone.utc),
        )

    # --- rosters ---
    def _team_roster(self, league: str, team_id: str, team_name: str) -> list[RosterPlayer]:
        sport = sport_for_league(league)
        rng = _rng(self.seed, "roster", team_id)
        players = []
        for i, position in enumerate(_POSITIONS[sport]):
            players.append(
                RosterPlayer(
                    player_id=f"{team_id}-P{i}",
                    player_name=f"{rng.choice(_FIRST)} {rng.choice(_LAST)}",
                    team_id=team_id,
                    team_name=team_name,
                    position=position,
                    jersey_number=str(rng.randint(0, 99)),
                )
            )
        return players

    async def get_rosters(self, game_ids: list[str], sport: str) -> dict[str, list[RosterPlayer]]:
        league = sport.upper()
        out: dict[str, list[RosterPlayer]] = {}
        for game_id in game_ids:
            game = self._game(game_id, league)
            if game is None:
                continue
            out[game_id] = self._team_roster(league, game.home_team_id, game.home_team_name) + self._team_roster(
                league, game.away_team_id, game.away_team_name
            )
        return out

    # --- stats ---
    def _player_mean(self, league: str, player_id: str) -> dict[str, float]:
        sport = sport_for_league(league)
        team_id, _, idx = player_id.rpartition("-P")
        position = _POSITIONS[sport][int(idx) % len(_POSITIONS[sport])] if idx.isdigit() else ""
        rng = _rng(self.seed, "talent", player_id)
        scale = rng.uniform(0.6, 1.4)
        return {k: v * scale for k, v in _profile(sport, position).items()}

    def _stat_line(self, league: str, player_id: str, salt: str) -> dict[str, float]:
        sport = sport_for_league(league)
        rng = _rng(self.seed, "line", player_id, salt)
        line = {}
        for key, mean in self._player_mean(league, player_id).items():
            value = max(0.0, rng.gauss(mean, max(mean * 0.3, 0.2)))
            line[key] = round(value) if sport != Sport.SOCCER and mean >= 1 else round(value, 2)
        return line

    async def get_recent_player_stats(
        self,
        player_ids: list[str],
        sport: str,
        lookback_games: int = 10,
    ) -> dict[str, list[PlayerGameStats]]:
        league = sport.upper()
        out: dict[str, list[PlayerGameStats]] = {}
        for pid in player_ids:
            out[pid] = [
                PlayerGameStats(player_id=pid, game_id=f"hist-{i}", stats=self._stat_line(league, pid, f"hist-{i}"))
                for i in range(lookback_games)
            ]
        return out

    async def get_historical_team_stats(self, team_ids: list[str], sport: str) -> dict[str, dict[str, float]]:
        s = sport_for_league(sport)
        key, mean, spread = _TEAM_SCORING[s]
        out = {}
        for team_id in team_ids:
            rng = _rng(self.seed, "team", team_id)
            out[team_id] = {key: round(rng.uniform(mean - spread, mean + spread), 1)}
        return out

    # --- injuries ---
    async def get_injury_report(self, date: str, sport: str) -> list[PlayerInjury]:
        league = sport.upper()
        rng = _rng(self.seed, "injury", league, date)
        report = []
        for game in await self.get_games(date, league):
            rosters = await self.get_rosters([game.game_id], league)
            for player in rosters.get(game.game_id, []):
                if rng.random() < 0.12:
                    status = rng.choices(
                        ["OUT", "Questionable", "Doubtful", "Probable"],
                        weights=[0.3, 0.35, 0.15, 0.2],
                    )[0]
                    report.append(
                        PlayerInjury(
                            player_id=player.player_id,
                            player_name=player.player_name,
                            team_id=player.team_id,
                            status=status,
                            injury_type=rng.choice(["ankle", "knee", "hamstring", "illness"]),
                        )
                    )
        return report

    # --- odds ---
    async def get_consensus_props(self, date: str, sport: str) -> list[ConsensusLine]:
        league = sport.upper()
        s = sport_for_league(league)
        rng = _rng(self.seed, "odds", league, date)
        lines: list[ConsensusLine] = []
        games = await self.get_games(date, league)
        rosters = await self.get_rosters([g.game_id for g in games], league)
        team_stats = await self.get_historical_team_stats(
            [t for g in games for t in (g.home_team_id, g.away_team_id)], league
        )
        team_key = _TEAM_SCORING[s][0]
        for game in games:
            for player in rosters.get(game.game_id, []):
                mean = self._player_mean(league, player.player_id)
                for stat, market in _PROP_MARKETS[s].items():
                    if stat not in mean:
                        continue
                    noise = rng.gauss(0, max(mean[stat] * 0.2, 0.3))
                    line = max(0.5, round((mean[stat] + noise) * 2) / 2)
                    lines.append(
                        ConsensusLine(
                            market_id=f"{game.game_id}_{player.player_id}_{market}",
                            game_id=game.game_id,
                            sport=league,
                            player_id=player.player_id,
                            player_name=player.player_name,
                            team_id=player.team_id,
                            team_name=player.team_name,
                            market=market,
                            line=line,
                            over_odds=-110,
                            under_odds=-110,
                        )
                    )
            total = 0.0
            for team_id, team_name in ((game.home_team_id, game.home_team_name), (game.away_team_id, game.away_team_name)):
                base = team_stats[team_id][team_key]
                total += base
                lines.append(
                    ConsensusLine(
                        market_id=f"{game.game_id}_{team_id}_team_total",
                        game_id=game.game_id,
                        sport=league,
                        team_id=team_id,
                        team_name=team_name,
                        market=TEAM_TOTAL,
                        line=round((base + rng.gauss(0, _TEAM_SCORING[s][2] / 2)) * 2) / 2,
                    )
                )
            lines.append(
                ConsensusLine(
                    market_id=f"{game.game_id}_game_total",
                    game_id=game.game_id,
                    sport=league,
                    team_name=f"{game.away_team_name} @ {game.home_team_name}",
                    market=GAME_TOTAL,
                    line=round((total + rng.gauss(0, _TEAM_SCORING[s][2])) * 2) / 2,
                )
            )
        return lines

    # --- box scores ---
    async def get_box_score(self, game_id: str, sport: str) -> BoxScore | None:
        league = sport.upper()
        game = self._game(game_id, league)
        if game is None:
            return None
        if datetime.fromisoformat(_game_date(game_id)).date() >= datetime.now(timezone.utc).date():
            return None
        s = sport_for_league(league)
        key = _TEAM_SCORING[s][0]
        team_stats = await self.get_historical_team_stats([game.home_team_id, game.away_team_id], league)
        rng = _rng(self.seed, "final", game_id)
        rosters = await self.get_rosters([game_id], league)
        player_stats = {
            p.player_id: self._stat_line(league, p.player_id, f"final-{game_id}") for p in rosters.get(game_id, [])
        }
        spread = _TEAM_SCORING[s][2]
        return BoxScore(
            game_id=game_id,
            status="final",
            home_team_id=game.home_team_id,
            away_team_id=game.away_team_id,
            home_score=max(0, round(rng.gauss(team_stats[game.home_team_id][key], spread))),
            away_score=max(0, round(rng.gauss(team_stats[game.away_team_id][key], spread))),
            player_stats=player_stats,
        )
