"""Pydantic schemas for leaderboard APIs."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from sevalink.domain.leaderboards.models import LeaderboardEntry


class LeaderboardRowSchema(BaseModel):
	rank: int = Field(..., ge=1)
	subject_id: str
	total_hours: float = Field(..., ge=0)
	display_name: Optional[str] = None

	@classmethod
	def from_entry(cls, entry: LeaderboardEntry) -> "LeaderboardRowSchema":
		return cls(
			rank=entry.rank,
			subject_id=entry.subject_id,
			total_hours=entry.total_hours,
			display_name=entry.display_name,
		)


class LeaderboardMeta(BaseModel):
	count: int
	last_updated: Optional[datetime] = None


class LeaderboardResponseSchema(BaseModel):
	items: list[LeaderboardRowSchema]
	meta: LeaderboardMeta
