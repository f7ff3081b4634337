"""FastAPI server for Baton."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional, Dict, Any, List

from fastapi import FastAPI, HTTPException, Header, Depends
from pydantic import BaseModel, Field

from baton import (
    AdaptiveRouter,
    NoCandidatesError,
    ValidationError,
)


def _get_api_key() -> Optional[str]:
    return os.getenv("BATON_API_KEY")


def _require_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    api_key = _get_api_key()
    if api_key and x_api_key != api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


@lru_cache(maxsize=1)
def get_router() -> AdaptiveRouter:
    """Process-wide router, built from environment configuration."""
    return AdaptiveRouter.from_settings()


app = FastAPI(title="Baton API", version="1.0.0")


class TurnModel(BaseModel):
    role: str = "user"
    content: str = ""


class RouteRequest(BaseModel):
    message: str
    history: List[TurnModel] = Field(default_factory=list)
    latency_target: Optional[str] = Field(None, pattern="^(fast|balanced|thorough)$")
    cost_sensitivity: Optional[str] = Field(None, pattern="^(low|medium|high)$")


class RouteResponse(BaseModel):
    backend_id: str
    task_type: str
    domain: str
    complexity: float
    context_units: int
    latency_target: str
    cost_sensitivity: str
    needs_structured_output: bool
    scores: Dict[str, float]
    why: str


class OutcomeRequest(BaseModel):
    backend_id: str = Field(..., min_length=1)
    task_type: str
    domain: str = "general"
    latency_ms: float = Field(..., ge=0)
    prompt_units: int = Field(0, ge=0)
    completion_units: int = Field(0, ge=0)
    cost: float = Field(0.0, ge=0)
    success: bool = True
    quality_score: Optional[float] = Field(None, ge=0, le=1)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/route", response_model=RouteResponse, dependencies=[Depends(_require_api_key)])
def route(req: RouteRequest, router: AdaptiveRouter = Depends(get_router)) -> RouteResponse:
    preferences = {}
    if req.latency_target:
        preferences["latency_target"] = req.latency_target
    if req.cost_sensitivity:
        preferences["cost_sensitivity"] = req.cost_sensitivity

    try:
        decision = router.route(
            req.message,
            [turn.model_dump() for turn in req.history],
            preferences,
        )
    except NoCandidatesError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    profile = decision.profile
    return RouteResponse(
        backend_id=decision.backend_id,
        task_type=profile.task_type.value,
        domain=profile.domain,
        complexity=profile.complexity,
        context_units=profile.context_units,
        latency_target=profile.latency_target.value,
        cost_sensitivity=profile.cost_sensitivity.value,
        needs_structured_output=profile.needs_structured_output,
        scores=decision.scores,
        why=decision.why,
    )


@app.post("/outcomes", dependencies=[Depends(_require_api_key)])
def record_outcome(req: OutcomeRequest, router: AdaptiveRouter = Depends(get_router)) -> Dict[str, Any]:
    try:
        outcome = router.record_outcome(
            backend_id=req.backend_id,
            task_type=req.task_type,
            domain=req.domain,
            latency_ms=req.latency_ms,
            prompt_units=req.prompt_units,
            completion_units=req.completion_units,
            cost=req.cost,
            success=req.success,
            quality_score=req.quality_score,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return outcome.to_dict()


@app.get("/stats", dependencies=[Depends(_require_api_key)])
def stats(router: AdaptiveRouter = Depends(get_router)) -> Dict[str, Any]:
    return router.get_stats()


@app.post("/discover", dependencies=[Depends(_require_api_key)])
def discover(router: AdaptiveRouter = Depends(get_router)) -> Dict[str, Any]:
    added = router.discover_backends()
    return {
        "added": added,
        "total_backends": len(router.registry),
    }


@app.get("/backends", dependencies=[Depends(_require_api_key)])
def backends(router: AdaptiveRouter = Depends(get_router)) -> List[Dict[str, Any]]:
    return [b.to_dict() for b in router.registry]
