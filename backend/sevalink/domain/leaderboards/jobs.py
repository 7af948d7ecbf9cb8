"""Background job that periodically recomputes the leaderboard."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from sevalink.domain.leaderboards.service import LeaderboardService

logger = logging.getLogger(__name__)

JOB_ID = "leaderboard-recompute"


class LeaderboardScheduler:
	"""Minimal wrapper around AsyncIOScheduler for the recompute job."""

	def __init__(self, service: LeaderboardService, *, minutes: int) -> None:
		self._service = service
		self._minutes = minutes
		self._scheduler = AsyncIOScheduler(timezone="UTC")
		self._started = False

	@property
	def started(self) -> bool:
		return self._started

	async def run_once(self) -> None:
		"""Entry point for the scheduled job; failures are logged, the next tick retries."""

		try:
			await self._service.compute_leaderboard()
		except Exception:
			logger.warning("scheduled leaderboard recompute failed", exc_info=True)

	def start(self) -> None:
		if self._started or self._minutes <= 0:
			return
		trigger = IntervalTrigger(minutes=self._minutes)
		self._scheduler.add_job(self.run_once, trigger=trigger, id=JOB_ID, replace_existing=True)
		self._scheduler.start()
		self._started = True

	def shutdown(self) -> None:
		if self._started:
			self._scheduler.shutdown(wait=False)
			self._started = False


__all__ = ["LeaderboardScheduler"]
