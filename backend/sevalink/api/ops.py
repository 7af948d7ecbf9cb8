"""Operational endpoints: liveness and Prometheus scrape."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from sevalink.infra.redis import redis_client
from sevalink.settings import settings

router = APIRouter(tags=["ops"])


@router.get("/health")
async def health(request: Request) -> dict:
    state = request.app.state
    candidate_backend = getattr(state, "candidate_backend", None)
    leaderboard_backend = getattr(state, "leaderboard_backend", None)
    payload = {
        "status": "ok",
        "service": settings.service_name,
        "commit": settings.git_commit,
        "candidate_backend": candidate_backend,
        "leaderboard_backend": leaderboard_backend,
    }
    if "redis" in (candidate_backend, leaderboard_backend):
        redis_ok = await redis_client.ping_ok()
        payload["redis"] = redis_ok
        if not redis_ok:
            payload["status"] = "degraded"
    return payload


@router.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
