"""Great-circle distance helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Protocol, Tuple, TypeVar

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True, slots=True)
class GeoPoint:
	"""Latitude/longitude pair in decimal degrees.

	Range checks belong to the request boundary; the math below trusts its input.
	"""

	latitude: float
	longitude: float


class Located(Protocol):
	@property
	def location(self) -> GeoPoint: ...


L = TypeVar("L", bound=Located)


def distance(a: GeoPoint, b: GeoPoint) -> float:
	"""Return the haversine distance between two points in kilometres."""

	lat1 = math.radians(a.latitude)
	lat2 = math.radians(b.latitude)
	d_lat = math.radians(b.latitude - a.latitude)
	d_lon = math.radians(b.longitude - a.longitude)
	h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
	c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
	return EARTH_RADIUS_KM * c


def sort_by_distance(center: GeoPoint, items: Iterable[L]) -> List[Tuple[L, float]]:
	"""Pair every item with its distance from ``center``, nearest first.

	Equal distances are ordered by the item's ``id`` when it has one.
	"""

	measured = [(item, distance(center, item.location)) for item in items]
	measured.sort(key=lambda pair: (pair[1], str(getattr(pair[0], "id", ""))))
	return measured


def round_km(value: float) -> float:
	"""Presentation rounding (one decimal). Never used inside ranking."""

	return round(value, 1)


__all__ = ["EARTH_RADIUS_KM", "GeoPoint", "distance", "round_km", "sort_by_distance"]
