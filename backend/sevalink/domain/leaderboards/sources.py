"""Contribution event supply adapters."""

from __future__ import annotations

import logging
import re
from typing import Awaitable, Callable, Iterable, List, Protocol

import asyncpg

from sevalink.domain.leaderboards.models import ContributionEvent, InvalidContribution

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ContributionSourceError(RuntimeError):
	"""Raised when the contribution ledger cannot be read."""


class ContributionSource(Protocol):
	async def fetch_all_contribution_events(self) -> List[ContributionEvent]:
		...


class InMemoryContributionSource:
	"""Append-only in-process ledger used in dev and tests."""

	def __init__(self, events: Iterable[ContributionEvent] = ()) -> None:
		self._events: List[ContributionEvent] = list(events)

	def append(self, event: ContributionEvent) -> None:
		self._events.append(event)

	async def fetch_all_contribution_events(self) -> List[ContributionEvent]:
		return list(self._events)


class PostgresContributionSource:
	"""Reads every activity row from the ledger table.

	Rows that fail validation (negative hours, missing subject) are skipped and
	logged rather than poisoning the whole recompute.
	"""

	def __init__(
		self,
		pool_provider: Callable[[], Awaitable[asyncpg.pool.Pool]],
		*,
		table: str = "volunteer_activities",
	) -> None:
		if not _IDENTIFIER.match(table):
			raise ValueError(f"invalid table name: {table!r}")
		self._pool_provider = pool_provider
		self._query = (
			f"SELECT volunteer_id AS subject_id, working_hours AS hours, volunteer_name AS display_name FROM {table}"
		)

	async def fetch_all_contribution_events(self) -> List[ContributionEvent]:
		try:
			pool = await self._pool_provider()
			rows = await pool.fetch(self._query)
		except (asyncpg.PostgresError, OSError) as exc:
			raise ContributionSourceError("failed to read contribution ledger") from exc
		events: List[ContributionEvent] = []
		skipped = 0
		for row in rows:
			try:
				events.append(ContributionEvent.from_mapping(dict(row)))
			except InvalidContribution as exc:
				skipped += 1
				logger.warning("contribution_row_skipped reason=%s", exc)
		if skipped:
			logger.warning("contribution ledger skipped %d invalid rows", skipped)
		return events


__all__ = [
	"ContributionSource",
	"ContributionSourceError",
	"InMemoryContributionSource",
	"PostgresContributionSource",
]
