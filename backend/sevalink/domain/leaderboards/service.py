"""Service layer for the volunteer-hours leaderboard."""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from sevalink.domain.leaderboards.aggregate import aggregate
from sevalink.domain.leaderboards.models import LeaderboardEntry, LeaderboardSnapshot
from sevalink.domain.leaderboards.sources import ContributionSource
from sevalink.domain.leaderboards.store import LeaderboardStore
from sevalink.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 50
DEFAULT_LIMIT = 10


class LeaderboardService:
	"""Recomputes the ranked table from the ledger and serves the stored copy."""

	def __init__(
		self,
		source: ContributionSource,
		store: LeaderboardStore,
		*,
		top_n: int = DEFAULT_TOP_N,
	) -> None:
		self._source = source
		self._store = store
		self._top_n = top_n

	async def compute_leaderboard(self, top_n: Optional[int] = None) -> List[LeaderboardEntry]:
		"""Rebuild the leaderboard from every contribution event and swap it in."""

		n = self._top_n if top_n is None else top_n
		start = time.perf_counter()
		try:
			events = await self._source.fetch_all_contribution_events()
			entries = aggregate(events, n)
			snapshot = LeaderboardSnapshot(entries=tuple(entries))
			await self._store.replace(snapshot)
		except Exception:
			obs_metrics.record_leaderboard_recompute("error")
			logger.exception("leaderboard recompute failed top_n=%s", n)
			raise
		elapsed = time.perf_counter() - start
		obs_metrics.record_leaderboard_recompute("ok", entries=len(entries), elapsed_seconds=elapsed)
		logger.info("leaderboard recomputed events=%d entries=%d top_n=%d", len(events), len(entries), n)
		return entries

	async def get_snapshot(self) -> Optional[LeaderboardSnapshot]:
		return await self._store.current()

	async def get_leaderboard(self, limit: int = DEFAULT_LIMIT) -> List[LeaderboardEntry]:
		snapshot = await self._store.current()
		if snapshot is None:
			return []
		return snapshot.top(limit)


__all__ = ["LeaderboardService"]
