"""REST API surface for volunteer/organization matching."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from sevalink.api.deps import get_match_service
from sevalink.domain.matching.models import CandidateKind
from sevalink.domain.matching.schemas import (
    Coordinates,
    MatchItem,
    MatchMeta,
    MatchResponse,
    NearbyQuery,
    split_tags,
)
from sevalink.domain.matching.service import MatchService
from sevalink.domain.matching.sources import CandidateSourceError
from sevalink.settings import settings

router = APIRouter(prefix="/match", tags=["match"])


def _build_query(**fields) -> NearbyQuery:
    try:
        return NearbyQuery(**fields)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


async def _run(service: MatchService, query: NearbyQuery, kind: CandidateKind) -> MatchResponse:
    try:
        search = await service.search(query.to_query(kind))
    except CandidateSourceError as exc:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "candidate store unavailable") from exc
    items = [MatchItem.build(result, search.candidates[result.candidate_id]) for result in search.results]
    return MatchResponse(
        results=items,
        meta=MatchMeta(
            count=len(items),
            radius_km=search.radius_km,
            center=Coordinates(lat=query.lat, lng=query.lng),
            kind=kind,
        ),
    )


@router.get("/nearby-organizations", response_model=MatchResponse)
async def nearby_organizations(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
    radius_km: Optional[float] = Query(default=None, ge=0.0),
    tags: Optional[str] = Query(default=None, description="Comma separated focus areas"),
    require_tag_match: bool = Query(default=False),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    service: MatchService = Depends(get_match_service),
) -> MatchResponse:
    """Verified organizations near a volunteer, closest first."""

    query = _build_query(
        lat=lat,
        lng=lng,
        radius_km=settings.match_org_default_radius_km if radius_km is None else radius_km,
        tags=split_tags(tags),
        limit=limit or settings.match_org_result_cap,
        require_tag_match=require_tag_match,
    )
    return await _run(service, query, CandidateKind.PROVIDER)


@router.get("/nearby-volunteers", response_model=MatchResponse)
async def nearby_volunteers(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
    radius_km: Optional[float] = Query(default=None, ge=0.0),
    skills: Optional[str] = Query(default=None, description="Comma separated required skills"),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    service: MatchService = Depends(get_match_service),
) -> MatchResponse:
    """Verified volunteers near a posting, skill match breaking near-ties."""

    query = _build_query(
        lat=lat,
        lng=lng,
        radius_km=settings.match_volunteer_default_radius_km if radius_km is None else radius_km,
        tags=split_tags(skills),
        limit=limit or settings.match_volunteer_result_cap,
    )
    return await _run(service, query, CandidateKind.SEEKER)
