"""REST-backed provider set (stats/odds service speaking JSON). All calls share one httpx.AsyncClient."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from slipsmith.errors import ProviderUnavailable
from slipsmith.models import (
    BoxScore,
    ConsensusLine,
    GameInfo,
    PlayerGameStats,
    PlayerInjury,
    RosterPlayer,
)

log = structlog.get_logger(__name__)


def _rows(data: Any, key: str) -> list[dict[str, Any]]:
    """Accept either a bare list or an envelope {key: [...]} / {data: [...]}."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        rows = data.get(key, data.get("data", []))
        return rows if isinstance(rows, list) else []
    return []


class HttpDataProvider:
    """Implements every provider protocol against `<base_url>/v1/...` endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
        )

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            resp = await self._client.get(path, params=params)
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderUnavailable(f"GET {path} failed: {e}") from e

    async def get_games(self, date: str, sport: str) -> list[GameInfo]:
        data = await self._get("/v1/schedule", {"date": date, "sport": sport})
        games = []
        for row in _rows(data, "games"):
            try:
                games.append(GameInfo.model_validate(row))
            except ValueError as e:
                log.warning("skip_game_row", game_id=row.get("game_id"), error=str(e))
        return games

    async def get_rosters(self, game_ids: list[str], sport: str) -> dict[str, list[RosterPlayer]]:
        data = await self._get("/v1/rosters", {"game_ids": ",".join(game_ids), "sport": sport}) or {}
        rosters = data.get("rosters", data) if isinstance(data, dict) else {}
        return {
            game_id: [RosterPlayer.model_validate(p) for p in players]
            for game_id, players in rosters.items()
            if isinstance(players, list)
        }

    async def get_recent_player_stats(
        self,
        player_ids: list[str],
        sport: str,
        lookback_games: int = 10,
    ) -> dict[str, list[PlayerGameStats]]:
        data = await self._get(
            "/v1/stats/players",
            {"player_ids": ",".join(player_ids), "sport": sport, "lookback": lookback_games},
        ) or {}
        players = data.get("players", data) if isinstance(data, dict) else {}
        return {
            pid: [PlayerGameStats.model_validate({"player_id": pid, **g}) for g in games][:lookback_games]
            for pid, games in players.items()
            if isinstance(games, list)
        }

    async def get_historical_team_stats(self, team_ids: list[str], sport: str) -> dict[str, dict[str, float]]:
        data = await self._get("/v1/stats/teams", {"team_ids": ",".join(team_ids), "sport": sport}) or {}
        teams = data.get("teams", data) if isinstance(data, dict) else {}
        return {
            tid: {k: float(v) for k, v in stats.items() if isinstance(v, (int, float))}
            for tid, stats in teams.items()
            if isinstance(stats, dict)
        }

    async def get_injury_report(self, date: str, sport: str) -> list[PlayerInjury]:
        data = await self._get("/v1/injuries", {"date": date, "sport": sport})
        report = []
        for row in _rows(data, "injuries"):
            try:
                report.append(PlayerInjury.model_validate(row))
            except ValueError as e:
                log.warning("skip_injury_row", player_id=row.get("player_id"), error=str(e))
        return report

    async def get_consensus_props(self, date: str, sport: str) -> list[ConsensusLine]:
        data = await self._get("/v1/odds/props", {"date": date, "sport": sport})
        lines = []
        for row in _rows(data, "props"):
            try:
                lines.append(ConsensusLine.model_validate({"sport": sport, **row}))
            except ValueError as e:
                log.warning("skip_prop_row", market_id=row.get("market_id"), error=str(e))
        return lines

    async def get_box_score(self, game_id: str, sport: str) -> BoxScore | None:
        data = await self._get(f"/v1/boxscores/{game_id}", {"sport": sport})
        if not data:
            return None
        return BoxScore.model_validate(data)

    async def aclose(self) -> None:
        await self._client.aclose()
