"""Dependency providers: routes receive services built in the app lifespan."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from sevalink.domain.leaderboards.service import LeaderboardService
from sevalink.domain.matching.service import MatchService


def get_match_service(request: Request) -> MatchService:
    service = getattr(request.app.state, "match_service", None)
    if service is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "matching unavailable")
    return service


def get_leaderboard_service(request: Request) -> LeaderboardService:
    service = getattr(request.app.state, "leaderboard_service", None)
    if service is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "leaderboard unavailable")
    return service
