"""Storage for the current leaderboard snapshot.

Both stores replace the table as a single unit: the new snapshot is built in
full first and then swapped in, so readers see either the old table or the
new one, never a mix.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Optional, Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from sevalink.domain.leaderboards.models import LeaderboardEntry, LeaderboardSnapshot


class LeaderboardStoreError(RuntimeError):
	"""Raised when the leaderboard store cannot be read or written."""


class LeaderboardStore(Protocol):
	async def replace(self, snapshot: LeaderboardSnapshot) -> None:
		...

	async def current(self) -> Optional[LeaderboardSnapshot]:
		...


class InMemoryLeaderboardStore:
	def __init__(self) -> None:
		self._snapshot: Optional[LeaderboardSnapshot] = None

	async def replace(self, snapshot: LeaderboardSnapshot) -> None:
		# Single reference assignment; the snapshot itself is immutable.
		self._snapshot = snapshot

	async def current(self) -> Optional[LeaderboardSnapshot]:
		return self._snapshot


def _encode(snapshot: LeaderboardSnapshot) -> str:
	return json.dumps(
		{
			"updated_at": snapshot.updated_at.isoformat(),
			"entries": [entry.to_mapping() for entry in snapshot.entries],
		},
		separators=(",", ":"),
	)


def _decode(raw: str) -> LeaderboardSnapshot:
	data = json.loads(raw)
	return LeaderboardSnapshot(
		entries=tuple(LeaderboardEntry.from_mapping(item) for item in data.get("entries", [])),
		updated_at=datetime.fromisoformat(data["updated_at"]),
	)


class RedisLeaderboardStore:
	"""Snapshot serialised under one key; written to a staging key, then RENAMEd."""

	def __init__(self, client: redis.Redis, *, key: str = "lb:hours:current") -> None:
		self._client = client
		self._key = key

	@property
	def key(self) -> str:
		return self._key

	async def replace(self, snapshot: LeaderboardSnapshot) -> None:
		staging = f"{self._key}:staging:{uuid.uuid4().hex}"
		try:
			await self._client.set(staging, _encode(snapshot))
			await self._client.rename(staging, self._key)
		except RedisError as exc:
			await self._discard(staging)
			raise LeaderboardStoreError("failed to swap leaderboard snapshot") from exc

	async def current(self) -> Optional[LeaderboardSnapshot]:
		try:
			raw = await self._client.get(self._key)
		except RedisError as exc:
			raise LeaderboardStoreError("failed to read leaderboard snapshot") from exc
		if raw is None:
			return None
		if isinstance(raw, bytes):
			raw = raw.decode("utf-8")
		return _decode(raw)

	async def _discard(self, staging: str) -> None:
		try:
			await self._client.delete(staging)
		except RedisError:
			# Staging keys are unique per attempt; a leftover one is harmless.
			pass


__all__ = [
	"InMemoryLeaderboardStore",
	"LeaderboardStore",
	"LeaderboardStoreError",
	"RedisLeaderboardStore",
]
