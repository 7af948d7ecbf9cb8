"""Domain models for the volunteer-hours leaderboard."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple


class InvalidContribution(ValueError):
	"""A ledger row that cannot be turned into a contribution event."""


@dataclass(frozen=True, slots=True)
class ContributionEvent:
	"""Append-only fact: ``subject_id`` contributed ``hours``."""

	subject_id: str
	hours: float
	display_name: Optional[str] = None

	@classmethod
	def from_mapping(cls, mapping: Mapping[str, Any]) -> "ContributionEvent":
		"""Validate a raw ledger row. Negative or non-finite hours are rejected."""

		subject = mapping.get("subject_id")
		if subject is None or str(subject).strip() == "":
			raise InvalidContribution("subject_id is required")
		raw_hours = mapping.get("hours")
		try:
			hours = float(raw_hours)
		except (TypeError, ValueError) as exc:
			raise InvalidContribution(f"hours must be numeric, got {raw_hours!r}") from exc
		if not math.isfinite(hours) or hours < 0:
			raise InvalidContribution(f"hours must be a finite value >= 0, got {raw_hours!r}")
		name = mapping.get("display_name")
		return cls(subject_id=str(subject), hours=hours, display_name=str(name) if name else None)


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
	"""Row for leaderboard ranking."""

	subject_id: str
	total_hours: float
	rank: int
	display_name: Optional[str] = None

	def to_mapping(self) -> dict[str, Any]:
		return {
			"subject_id": self.subject_id,
			"total_hours": self.total_hours,
			"rank": self.rank,
			"display_name": self.display_name,
		}

	@classmethod
	def from_mapping(cls, mapping: Mapping[str, Any]) -> "LeaderboardEntry":
		return cls(
			subject_id=str(mapping["subject_id"]),
			total_hours=float(mapping["total_hours"]),
			rank=int(mapping["rank"]),
			display_name=mapping.get("display_name") or None,
		)


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class LeaderboardSnapshot:
	"""A complete ranked table; stores swap these in as one unit."""

	entries: Tuple[LeaderboardEntry, ...] = ()
	updated_at: datetime = field(default_factory=_utcnow)

	def top(self, limit: int) -> list[LeaderboardEntry]:
		if limit <= 0:
			return []
		return list(self.entries[:limit])


__all__ = ["ContributionEvent", "InvalidContribution", "LeaderboardEntry", "LeaderboardSnapshot"]
