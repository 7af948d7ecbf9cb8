"""Leaderboard aggregation over contribution events.

Always a full recompute: totals are rebuilt from the complete event set on
every call, so the ranked table can never drift from the underlying ledger.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from sevalink.domain.leaderboards.models import ContributionEvent, LeaderboardEntry


def total_hours_by_subject(events: Iterable[ContributionEvent]) -> Dict[str, Tuple[float, Optional[str]]]:
	"""Sum hours per subject, keeping the first non-empty display name seen."""

	totals: Dict[str, Tuple[float, Optional[str]]] = {}
	for event in events:
		hours, name = totals.get(event.subject_id, (0.0, None))
		totals[event.subject_id] = (hours + event.hours, name or event.display_name)
	return totals


def aggregate(events: Iterable[ContributionEvent], top_n: int) -> List[LeaderboardEntry]:
	"""Rank subjects by total hours, highest first.

	Equal totals get distinct consecutive ranks ordered by ``subject_id``.
	"""

	if top_n <= 0:
		return []
	totals = total_hours_by_subject(events)
	ordered = sorted(totals.items(), key=lambda item: (-item[1][0], item[0]))
	return [
		LeaderboardEntry(subject_id=subject_id, total_hours=hours, rank=position, display_name=name)
		for position, (subject_id, (hours, name)) in enumerate(ordered[:top_n], start=1)
	]


__all__ = ["aggregate", "total_hours_by_subject"]
