"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from pydantic import BaseModel, Field

from slipsmith.models import EvaluationSummary, GameProjection, ReliabilityScore


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"
    provider_mode: str | None = None


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. invalid_date, unknown_league")


# --- Sports ---
class SportsResponse(BaseModel):
    sports: dict[str, list[str]] = Field(..., description="Sport -> supported league codes")


# --- Projections ---
class ProjectionsResponse(BaseModel):
    league: str
    date: str
    games: list[GameProjection]
    total: int


# --- Evaluation / reporting ---
class EvaluateResponse(BaseModel):
    date: str
    evaluated: int
    summary: EvaluationSummary


class SummaryResponse(BaseModel):
    start: str
    end: str
    summary: EvaluationSummary


class ReliabilityResponse(BaseModel):
    scores: list[ReliabilityScore]
    total: int
