"""Pydantic schemas for the matching endpoints."""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from sevalink.domain.geo.distance import GeoPoint, round_km
from sevalink.domain.matching.models import Candidate, CandidateKind, MatchQuery, MatchResult, normalize_tags

MAX_TAGS = 20


def split_tags(raw: Optional[str]) -> list[str]:
	"""Parse a comma separated query string into clean tags."""

	if not raw:
		return []
	return [part.strip() for part in raw.split(",") if part.strip()]


class NearbyQuery(BaseModel):
	"""Query parameters for a nearby lookup, validated once at the boundary."""

	lat: float = Field(..., ge=-90.0, le=90.0)
	lng: float = Field(..., ge=-180.0, le=180.0)
	radius_km: float = Field(..., ge=0.0)
	tags: list[str] = Field(default_factory=list)
	limit: int = Field(default=20, ge=1, le=100)
	require_tag_match: bool = False

	@field_validator("tags")
	def validate_tags(cls, value: list[str]) -> list[str]:
		if len(value) > MAX_TAGS:
			raise ValueError(f"at most {MAX_TAGS} tags are allowed")
		for tag in value:
			if len(tag) > 64:
				raise ValueError("tags must be at most 64 characters")
		return value

	def to_query(self, kind: CandidateKind, *, verified_only: bool = True) -> MatchQuery:
		return MatchQuery(
			point=GeoPoint(latitude=self.lat, longitude=self.lng),
			radius_km=self.radius_km,
			kind=kind,
			required_tags=normalize_tags(self.tags),
			limit=self.limit,
			verified_only=verified_only,
			require_tag_match=self.require_tag_match,
		)


def percent_score(affinity_score: float) -> int:
	"""Affinity as a whole percent, halves rounded up (0.625 -> 63)."""

	return int(math.floor(affinity_score * 100 + 0.5))


class Coordinates(BaseModel):
	lat: float
	lng: float


class MatchItem(BaseModel):
	"""One ranked candidate as presented to clients."""

	id: str
	rank: int = Field(..., ge=1)
	name: Optional[str] = None
	coordinates: Coordinates
	distance_km: float = Field(..., ge=0)
	affinity_score: float = Field(..., ge=0, le=1)
	match_score: int = Field(..., ge=0, le=100)
	tags: list[str] = Field(default_factory=list)
	matched_tags: list[str] = Field(default_factory=list)
	verified: bool = False

	@classmethod
	def build(cls, result: MatchResult, candidate: Candidate) -> "MatchItem":
		return cls(
			id=result.candidate_id,
			rank=result.combined_rank,
			name=candidate.display_name,
			coordinates=Coordinates(lat=candidate.location.latitude, lng=candidate.location.longitude),
			distance_km=round_km(result.distance_km),
			affinity_score=result.affinity_score,
			match_score=percent_score(result.affinity_score),
			tags=sorted(candidate.tags),
			matched_tags=list(result.matched_tags),
			verified=candidate.verified,
		)


class MatchMeta(BaseModel):
	count: int
	radius_km: float
	center: Coordinates
	kind: CandidateKind


class MatchResponse(BaseModel):
	results: list[MatchItem]
	meta: MatchMeta
