"""Match service: fetches candidates from the injected source and ranks them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from sevalink.domain.geo.radius import DEFAULT_MAX_RADIUS_KM, clamp_radius
from sevalink.domain.matching.affinity import matched_tags
from sevalink.domain.matching.models import Candidate, MatchQuery, MatchResult
from sevalink.domain.matching.ranking import DEFAULT_BAND_KM, rank
from sevalink.domain.matching.sources import CandidateSource
from sevalink.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MatchSearch:
	"""Ranked results plus the candidate records they refer to."""

	results: List[MatchResult]
	candidates: Dict[str, Candidate] = field(default_factory=dict)
	radius_km: float = 0.0


class MatchService:
	"""Coordinates candidate supply, policy filters and the ranking composer."""

	def __init__(
		self,
		source: CandidateSource,
		*,
		max_radius_km: float = DEFAULT_MAX_RADIUS_KM,
		band_km: float = DEFAULT_BAND_KM,
	) -> None:
		self._source = source
		self._max_radius_km = max_radius_km
		self._band_km = band_km

	async def find_matches(self, query: MatchQuery) -> List[MatchResult]:
		return (await self.search(query)).results

	async def search(self, query: MatchQuery) -> MatchSearch:
		radius = clamp_radius(query.radius_km, self._max_radius_km)
		obs_metrics.inc_match_query(query.kind.value, bool(query.required_tags))
		if radius <= 0:
			logger.warning("match_degenerate_query reason=radius radius_km=%s", query.radius_km)
			obs_metrics.inc_match_degenerate("radius")
			return MatchSearch(results=[], radius_km=max(radius, 0.0))
		if query.require_tag_match and not query.required_tags:
			logger.warning("match_degenerate_query reason=tags kind=%s", query.kind.value)
			obs_metrics.inc_match_degenerate("tags")
			return MatchSearch(results=[], radius_km=radius)

		fetched = await self._source.fetch_candidates_near(query.point, radius, query.kind)
		candidates = self._apply_policy(query, fetched)

		results = rank(
			query.point,
			radius,
			query.required_tags,
			candidates,
			limit=query.limit,
			band_km=self._band_km,
			max_radius_km=self._max_radius_km,
		)
		obs_metrics.observe_match_results(len(results))
		logger.info(
			"match.%s radius_km=%s tags=%d fetched=%d eligible=%d results=%d",
			query.kind.value,
			radius,
			len(query.required_tags),
			len(fetched),
			len(candidates),
			len(results),
		)
		lookup = {c.id: c for c in candidates}
		return MatchSearch(
			results=results,
			candidates={r.candidate_id: lookup[r.candidate_id] for r in results},
			radius_km=radius,
		)

	def _apply_policy(self, query: MatchQuery, fetched: List[Candidate]) -> List[Candidate]:
		eligible: List[Candidate] = []
		wrong_kind = unverified = untagged = 0
		for candidate in fetched:
			if candidate.kind is not query.kind:
				wrong_kind += 1
				continue
			if query.verified_only and not candidate.verified:
				unverified += 1
				continue
			if query.require_tag_match and not matched_tags(query.required_tags, candidate.tags):
				untagged += 1
				continue
			eligible.append(candidate)
		obs_metrics.inc_candidates_dropped("kind", wrong_kind)
		obs_metrics.inc_candidates_dropped("unverified", unverified)
		obs_metrics.inc_candidates_dropped("no_tag_match", untagged)
		return eligible


__all__ = ["MatchSearch", "MatchService"]
