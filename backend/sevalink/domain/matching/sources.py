"""Candidate supply adapters.

The matching service only depends on :class:`CandidateSource`; concrete
implementations live here so the storage choice stays pluggable. Whatever an
adapter returns is re-verified by the radius filter, so a coarse index is fine.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from sevalink.domain.geo.distance import GeoPoint
from sevalink.domain.matching.models import Candidate, CandidateKind

logger = logging.getLogger(__name__)

# Redis GEO search results are capped so one dense area cannot blow up a query.
REDIS_GEOSEARCH_COUNT = 1000

# Redis GEO measures on a 6372.797 km sphere, slightly longer than ours, so a
# search at the exact radius misses candidates sitting on the edge.
REDIS_RADIUS_SLACK = 1.001
REDIS_RADIUS_PAD_KM = 0.01


class CandidateSourceError(RuntimeError):
	"""Raised when the candidate store cannot be reached or returns garbage."""


class CandidateSource(Protocol):
	async def fetch_candidates_near(self, point: GeoPoint, radius_km: float, kind: CandidateKind) -> List[Candidate]:
		...


class InMemoryCandidateSource:
	"""Unindexed source: hands back every candidate of the requested kind."""

	def __init__(self, candidates: Iterable[Candidate] = ()) -> None:
		self._candidates: Dict[str, Candidate] = {c.id: c for c in candidates}

	def upsert(self, candidate: Candidate) -> None:
		self._candidates[candidate.id] = candidate

	def remove(self, candidate_id: str) -> None:
		self._candidates.pop(candidate_id, None)

	async def fetch_candidates_near(self, point: GeoPoint, radius_km: float, kind: CandidateKind) -> List[Candidate]:
		return [c for c in self._candidates.values() if c.kind is kind]


def search_radius_km(radius_km: float) -> float:
	"""Index query radius; the radius filter trims whatever this lets through."""

	return radius_km * REDIS_RADIUS_SLACK + REDIS_RADIUS_PAD_KM


def _geo_key(kind: CandidateKind) -> str:
	return f"geo:candidates:{kind.value}"


def _profile_key(candidate_id: str) -> str:
	return f"candidate:{candidate_id}"


class RedisGeoCandidateSource:
	"""Candidates indexed in a Redis GEO set per kind with a profile hash each."""

	def __init__(self, client: redis.Redis, *, count: int = REDIS_GEOSEARCH_COUNT) -> None:
		self._client = client
		self._count = count

	async def upsert(self, candidate: Candidate) -> None:
		try:
			await self._client.geoadd(
				_geo_key(candidate.kind),
				[candidate.location.longitude, candidate.location.latitude, candidate.id],
			)
			await self._client.hset(_profile_key(candidate.id), mapping=candidate.to_mapping())
		except RedisError as exc:
			raise CandidateSourceError(f"failed to index candidate {candidate.id}") from exc

	async def remove(self, candidate_id: str, kind: CandidateKind) -> None:
		try:
			await self._client.zrem(_geo_key(kind), candidate_id)
			await self._client.delete(_profile_key(candidate_id))
		except RedisError as exc:
			raise CandidateSourceError(f"failed to remove candidate {candidate_id}") from exc

	async def fetch_candidates_near(self, point: GeoPoint, radius_km: float, kind: CandidateKind) -> List[Candidate]:
		if radius_km <= 0:
			return []
		try:
			members = await self._client.geosearch(
				_geo_key(kind),
				longitude=point.longitude,
				latitude=point.latitude,
				radius=search_radius_km(radius_km),
				unit="km",
				sort="ASC",
				count=self._count,
			)
			if not members:
				return []
			ids = [str(member) for member in members]
			pipe = self._client.pipeline(transaction=False)
			for candidate_id in ids:
				pipe.hgetall(_profile_key(candidate_id))
			profiles = await pipe.execute()
		except RedisError as exc:
			raise CandidateSourceError("candidate geosearch failed") from exc
		candidates: List[Candidate] = []
		for candidate_id, raw in zip(ids, profiles):
			candidate = self._hydrate(candidate_id, raw)
			if candidate is not None:
				candidates.append(candidate)
		return candidates

	def _hydrate(self, candidate_id: str, raw: Mapping[str, str]) -> Optional[Candidate]:
		if not raw:
			# GEO member without a profile hash: index drifted, skip it.
			logger.warning("candidate_profile_missing", extra={"candidate_id": candidate_id})
			return None
		try:
			return Candidate.from_mapping(raw)
		except (KeyError, TypeError, ValueError):
			logger.warning("candidate_profile_invalid", extra={"candidate_id": candidate_id})
			return None


__all__ = [
	"CandidateSource",
	"CandidateSourceError",
	"InMemoryCandidateSource",
	"RedisGeoCandidateSource",
	"search_radius_km",
]
