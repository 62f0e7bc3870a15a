"""FastAPI surface over the slip service. Routing and parameter parsing only."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slipsmith.api.schemas import (
    ErrorResponse,
    EvaluateResponse,
    HealthResponse,
    ProjectionsResponse,
    ReliabilityResponse,
    SportsResponse,
    SummaryResponse,
)
from slipsmith.config import get_settings
from slipsmith.engine.slip import SlipService
from slipsmith.errors import InvalidDateFormat, PersistenceFailure, UnknownLeague
from slipsmith.models import EvaluationSummary, Slip
from slipsmith.sports import supported_sports
from slipsmith.storage import get_connection, init_schema

log = structlog.get_logger(__name__)

# Set by run_api() so every request resolves the same config profile.
_config_profile: str | None = None

_BAD_INPUT = {400: {"description": "Invalid date or league", "model": ErrorResponse}}


def _get_service() -> SlipService:
    return SlipService.from_settings(get_settings(_config_profile))


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings(_config_profile)
    conn = get_connection(settings.db_path)
    try:
        init_schema(conn)
    finally:
        conn.close()
    yield


app = FastAPI(title="SlipSmith API", version="0.1.0", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


def _error_json(code: str, message: str, status_code: int = 400) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def _bad_input(e: Exception) -> JSONResponse:
    code = "invalid_date" if isinstance(e, InvalidDateFormat) else "unknown_league"
    return _error_json(code, str(e), 400)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", provider_mode=get_settings(_config_profile).provider_mode)


@app.get("/sports", response_model=SportsResponse)
def sports() -> SportsResponse:
    return SportsResponse(sports=supported_sports())


@app.get("/top-events", response_model=Slip, response_model_exclude_none=True, responses=_BAD_INPUT)
async def top_events(
    date: str = Query(..., description="YYYY-MM-DD"),
    sport: str = Query(..., description="League code, e.g. NBA"),
    tier: str = Query("starter"),
    limit: int | None = Query(None, ge=1, le=200),
    min_probability: float | None = Query(None, alias="minProbability", ge=0, le=1),
):
    """Build the tiered slip for a league and date. minProbability is clamped to >= 0.60."""
    service = _get_service()
    try:
        return await service.get_top_events(date, sport, tier=tier, limit=limit, min_probability=min_probability)
    except (InvalidDateFormat, UnknownLeague) as e:
        return _bad_input(e)
    finally:
        await service.close()


@app.get("/projections/{league}/{date}", response_model=ProjectionsResponse, responses=_BAD_INPUT)
async def projections(league: str, date: str):
    service = _get_service()
    try:
        games = await service.get_projections(league, date)
        return ProjectionsResponse(league=league.upper(), date=date, games=games, total=len(games))
    except (InvalidDateFormat, UnknownLeague) as e:
        return _bad_input(e)
    finally:
        await service.close()


@app.post("/evaluate/{date}", response_model=EvaluateResponse, responses=_BAD_INPUT)
async def evaluate(date: str):
    """Evaluate pending events for date; games without a final box score stay pending."""
    service = _get_service()
    try:
        evaluated = await service.evaluate_date(date)
        return EvaluateResponse(date=date, evaluated=len(evaluated), summary=EvaluationSummary.from_results(evaluated))
    except InvalidDateFormat as e:
        return _bad_input(e)
    except PersistenceFailure as e:
        log.error("evaluate_failed", date=date, error=str(e))
        return _error_json("persistence_failure", str(e), 500)
    finally:
        await service.close()


@app.get("/summary", response_model=SummaryResponse, responses=_BAD_INPUT)
async def summary(
    start: str = Query(..., description="YYYY-MM-DD"),
    end: str = Query(..., description="YYYY-MM-DD"),
):
    service = _get_service()
    try:
        return SummaryResponse(start=start, end=end, summary=service.get_summary(start, end))
    except InvalidDateFormat as e:
        return _bad_input(e)
    finally:
        await service.close()


@app.get("/reliability", response_model=ReliabilityResponse)
async def reliability(sport: str | None = Query(None, description="Sport or league code")):
    service = _get_service()
    try:
        scores = service.get_reliability_report(sport)
        return ReliabilityResponse(scores=scores, total=len(scores))
    finally:
        await service.close()


def run_api(host: str = "127.0.0.1", port: int = 8000, profile: str | None = None) -> None:
    global _config_profile
    _config_profile = profile
    import uvicorn

    uvicorn.run("slipsmith.api.main:app", host=host, port=port, reload=False)
