"""Ranking composer blending distance and tag affinity.

Ordering rules:

1. nearest first;
2. candidates within ``band_km`` of a band anchor (the nearest candidate not
   yet placed in a band) form one distance band, re-ordered by affinity
   descending, then distance, then id;
3. candidate id ascending is the last tie-break, so identical inputs always
   produce identical output.

Bands are anchored rather than pairwise so the relation stays transitive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from sevalink.domain.geo.distance import GeoPoint
from sevalink.domain.geo.radius import DEFAULT_MAX_RADIUS_KM, within_with_distance
from sevalink.domain.matching.affinity import affinity, matched_tags
from sevalink.domain.matching.models import Candidate, MatchResult

DEFAULT_BAND_KM = 1.0
DEFAULT_RESULT_CAP = 20


@dataclass(slots=True)
class _Scored:
	candidate: Candidate
	distance_km: float
	affinity_score: float


def _distance_key(item: _Scored) -> tuple:
	return (item.distance_km, item.candidate.id)


def _band_key(item: _Scored) -> tuple:
	return (-item.affinity_score, item.distance_km, item.candidate.id)


def split_into_bands(items: Sequence[_Scored], band_km: float) -> List[List[_Scored]]:
	"""Group distance-sorted items into anchored bands."""

	bands: List[List[_Scored]] = []
	current: List[_Scored] = []
	anchor = 0.0
	for item in items:
		if current and item.distance_km - anchor < band_km:
			current.append(item)
			continue
		if current:
			bands.append(current)
		current = [item]
		anchor = item.distance_km
	if current:
		bands.append(current)
	return bands


def rank(
	point: GeoPoint,
	radius_km: float,
	required: Iterable[str],
	candidates: Iterable[Candidate],
	*,
	limit: int = DEFAULT_RESULT_CAP,
	band_km: float = DEFAULT_BAND_KM,
	max_radius_km: float = DEFAULT_MAX_RADIUS_KM,
) -> List[MatchResult]:
	"""Filter, score and order candidates around ``point``.

	Returns at most ``limit`` results with dense ``combined_rank`` values
	starting at 1. Degenerate queries (non-positive radius or limit, nothing in
	range) return an empty list rather than raising.
	"""

	if limit <= 0:
		return []
	required_tags = list(required or ())
	in_range = within_with_distance(point, radius_km, candidates, max_radius_km=max_radius_km)
	if not in_range:
		return []

	# A candidate id appearing twice upstream is kept once (its nearest copy).
	by_id: dict[str, _Scored] = {}
	for candidate, dist in in_range:
		existing = by_id.get(candidate.id)
		if existing is not None and existing.distance_km <= dist:
			continue
		by_id[candidate.id] = _Scored(
			candidate=candidate,
			distance_km=dist,
			affinity_score=affinity(required_tags, candidate.tags),
		)

	ordered = sorted(by_id.values(), key=_distance_key)
	if band_km > 0:
		ordered = [item for band in split_into_bands(ordered, band_km) for item in sorted(band, key=_band_key)]

	results: List[MatchResult] = []
	for position, item in enumerate(ordered[:limit], start=1):
		results.append(
			MatchResult(
				candidate_id=item.candidate.id,
				distance_km=item.distance_km,
				affinity_score=item.affinity_score,
				combined_rank=position,
				matched_tags=matched_tags(required_tags, item.candidate.tags),
			)
		)
	return results


__all__ = ["DEFAULT_BAND_KM", "DEFAULT_RESULT_CAP", "rank", "split_into_bands"]
