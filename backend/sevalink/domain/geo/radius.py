"""Radius filtering over candidate locations.

Upstream spatial indexes (Redis GEO, database geo queries) may be approximate
or over-inclusive, so every candidate is re-measured here before it is let
through. Order of the output is unspecified; ranking imposes it later.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple, TypeVar

from sevalink.domain.geo.distance import GeoPoint, Located, distance

DEFAULT_MAX_RADIUS_KM = 100.0

L = TypeVar("L", bound=Located)


def clamp_radius(radius_km: float, max_radius_km: float = DEFAULT_MAX_RADIUS_KM) -> float:
	"""Reduce oversized radii to the system cap instead of rejecting them."""

	return min(radius_km, max_radius_km)


def within_with_distance(
	point: GeoPoint,
	radius_km: float,
	candidates: Iterable[L],
	*,
	max_radius_km: float = DEFAULT_MAX_RADIUS_KM,
) -> List[Tuple[L, float]]:
	radius = clamp_radius(radius_km, max_radius_km)
	if radius <= 0:
		return []
	kept: List[Tuple[L, float]] = []
	for candidate in candidates:
		dist = distance(point, candidate.location)
		if dist <= radius:
			kept.append((candidate, dist))
	return kept


def within(
	point: GeoPoint,
	radius_km: float,
	candidates: Iterable[L],
	*,
	max_radius_km: float = DEFAULT_MAX_RADIUS_KM,
) -> List[L]:
	"""Return the candidates whose distance from ``point`` is at most ``radius_km``."""

	return [candidate for candidate, _ in within_with_distance(point, radius_km, candidates, max_radius_km=max_radius_km)]


__all__ = ["DEFAULT_MAX_RADIUS_KM", "clamp_radius", "within", "within_with_distance"]
