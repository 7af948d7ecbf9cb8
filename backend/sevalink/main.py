"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from sevalink.api import leaderboards, matching, ops
from sevalink.api.errors import install_error_handlers
from sevalink.domain.leaderboards.jobs import LeaderboardScheduler
from sevalink.domain.leaderboards.service import LeaderboardService
from sevalink.domain.leaderboards.sources import (
	ContributionSource,
	InMemoryContributionSource,
	PostgresContributionSource,
)
from sevalink.domain.leaderboards.store import InMemoryLeaderboardStore, LeaderboardStore, RedisLeaderboardStore
from sevalink.domain.matching.service import MatchService
from sevalink.domain.matching.sources import CandidateSource, InMemoryCandidateSource, RedisGeoCandidateSource
from sevalink.infra import postgres
from sevalink.infra.redis import redis_client
from sevalink.obs import init as obs_init
from sevalink.settings import settings


def build_candidate_source(backend: str) -> CandidateSource:
	if backend == "redis":
		return RedisGeoCandidateSource(redis_client)
	if backend == "memory":
		return InMemoryCandidateSource()
	raise ValueError(f"unknown candidate backend: {backend}")


def build_contribution_source(backend: str) -> ContributionSource:
	if backend == "postgres":
		return PostgresContributionSource(postgres.get_pool, table=settings.contribution_table)
	if backend == "memory":
		return InMemoryContributionSource()
	raise ValueError(f"unknown contribution backend: {backend}")


def build_leaderboard_store(backend: str) -> LeaderboardStore:
	if backend == "redis":
		return RedisLeaderboardStore(redis_client, key=settings.leaderboard_redis_key)
	if backend == "memory":
		return InMemoryLeaderboardStore()
	raise ValueError(f"unknown leaderboard backend: {backend}")


def build_match_service() -> MatchService:
	return MatchService(
		build_candidate_source(settings.candidate_backend),
		max_radius_km=settings.match_max_radius_km,
		band_km=settings.match_distance_band_km,
	)


def build_leaderboard_service() -> LeaderboardService:
	return LeaderboardService(
		build_contribution_source(settings.contribution_backend),
		build_leaderboard_store(settings.leaderboard_backend),
		top_n=settings.leaderboard_top_n,
	)


@asynccontextmanager
async def lifespan(app: FastAPI):
	if getattr(app.state, "match_service", None) is None:
		app.state.match_service = build_match_service()
		app.state.candidate_backend = settings.candidate_backend
	if getattr(app.state, "leaderboard_service", None) is None:
		app.state.leaderboard_service = build_leaderboard_service()
		app.state.leaderboard_backend = settings.leaderboard_backend
	uses_postgres = settings.contribution_backend == "postgres"
	if uses_postgres:
		await postgres.init_pool()
	scheduler = LeaderboardScheduler(app.state.leaderboard_service, minutes=settings.leaderboard_refresh_minutes)
	scheduler.start()
	app.state.leaderboard_scheduler = scheduler
	try:
		yield
	finally:
		scheduler.shutdown()
		if uses_postgres:
			await postgres.close_pool()


def create_app(
	*,
	match_service: Optional[MatchService] = None,
	leaderboard_service: Optional[LeaderboardService] = None,
) -> FastAPI:
	app = FastAPI(title="SevaLink Matching", lifespan=lifespan)
	if match_service is not None:
		app.state.match_service = match_service
		app.state.candidate_backend = "injected"
	if leaderboard_service is not None:
		app.state.leaderboard_service = leaderboard_service
		app.state.leaderboard_backend = "injected"
	obs_init(app)
	install_error_handlers(app)
	app.include_router(ops.router)
	app.include_router(matching.router)
	app.include_router(leaderboards.router)
	return app


app = create_app()
