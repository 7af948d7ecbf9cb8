"""FastAPI routes for the volunteer-hours leaderboard."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from sevalink.api.deps import get_leaderboard_service
from sevalink.domain.leaderboards.schemas import LeaderboardMeta, LeaderboardResponseSchema, LeaderboardRowSchema
from sevalink.domain.leaderboards.service import LeaderboardService
from sevalink.domain.leaderboards.sources import ContributionSourceError
from sevalink.domain.leaderboards.store import LeaderboardStoreError
from sevalink.settings import settings

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponseSchema)
async def leaderboard_endpoint(
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> LeaderboardResponseSchema:
    try:
        snapshot = await service.get_snapshot()
    except LeaderboardStoreError as exc:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "leaderboard store unavailable") from exc
    if snapshot is None:
        return LeaderboardResponseSchema(items=[], meta=LeaderboardMeta(count=0))
    entries = snapshot.top(limit or settings.leaderboard_default_limit)
    items = [LeaderboardRowSchema.from_entry(entry) for entry in entries]
    return LeaderboardResponseSchema(
        items=items,
        meta=LeaderboardMeta(count=len(items), last_updated=snapshot.updated_at),
    )


@router.post("/recompute", response_model=LeaderboardResponseSchema)
async def recompute_endpoint(
    top_n: Optional[int] = Query(default=None, ge=1, le=1000),
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> LeaderboardResponseSchema:
    try:
        entries = await service.compute_leaderboard(top_n)
        snapshot = await service.get_snapshot()
    except (ContributionSourceError, LeaderboardStoreError) as exc:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "leaderboard recompute failed") from exc
    items = [LeaderboardRowSchema.from_entry(entry) for entry in entries]
    return LeaderboardResponseSchema(
        items=items,
        meta=LeaderboardMeta(count=len(items), last_updated=snapshot.updated_at if snapshot else None),
    )
