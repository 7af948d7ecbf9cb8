"""Domain models used by the matching engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple

from sevalink.domain.geo.distance import GeoPoint


class CandidateKind(str, Enum):
	"""Which side of the marketplace a candidate sits on."""

	SEEKER = "seeker"  # volunteer
	PROVIDER = "provider"  # organization


def normalize_tags(tags: Iterable[str] | None) -> FrozenSet[str]:
	"""Trim, lowercase and drop empty tags."""

	if not tags:
		return frozenset()
	return frozenset(tag.strip().lower() for tag in tags if isinstance(tag, str) and tag.strip())


@dataclass(frozen=True, slots=True)
class Candidate:
	"""Read-only candidate record supplied by the storage layer."""

	id: str
	location: GeoPoint
	tags: FrozenSet[str] = frozenset()
	verified: bool = False
	kind: CandidateKind = CandidateKind.PROVIDER
	display_name: Optional[str] = None

	@classmethod
	def from_mapping(cls, mapping: Mapping[str, Any]) -> "Candidate":
		"""Construct a candidate from a flat mapping (Redis hash, JSON row)."""

		raw_tags = mapping.get("tags") or ()
		if isinstance(raw_tags, str):
			raw_tags = raw_tags.split(",")
		verified = mapping.get("verified", False)
		if isinstance(verified, str):
			verified = verified.strip().lower() in ("1", "true", "yes")
		return cls(
			id=str(mapping["id"]),
			location=GeoPoint(latitude=float(mapping["lat"]), longitude=float(mapping["lng"])),
			tags=normalize_tags(raw_tags),
			verified=bool(verified),
			kind=CandidateKind(mapping.get("kind") or CandidateKind.PROVIDER.value),
			display_name=mapping.get("display_name") or None,
		)

	def to_mapping(self) -> dict[str, str]:
		"""Serialise back into a flat mapping suitable for HSET."""

		return {
			"id": self.id,
			"lat": repr(self.location.latitude),
			"lng": repr(self.location.longitude),
			"tags": ",".join(sorted(self.tags)),
			"verified": "1" if self.verified else "0",
			"kind": self.kind.value,
			"display_name": self.display_name or "",
		}


@dataclass(frozen=True, slots=True)
class MatchResult:
	"""One ranked row of a match query."""

	candidate_id: str
	distance_km: float
	affinity_score: float
	combined_rank: int
	matched_tags: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MatchQuery:
	"""Closed description of a match request, validated before it gets here."""

	point: GeoPoint
	radius_km: float
	kind: CandidateKind
	required_tags: FrozenSet[str] = field(default_factory=frozenset)
	limit: int = 20
	verified_only: bool = True
	# When set, candidates without any tag overlap are dropped instead of ranked last.
	require_tag_match: bool = False


__all__ = ["Candidate", "CandidateKind", "MatchQuery", "MatchResult", "normalize_tags"]
