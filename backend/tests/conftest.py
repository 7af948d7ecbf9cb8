import math
import sys
from pathlib import Path
from typing import Iterable, Optional

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from sevalink.domain.geo.distance import EARTH_RADIUS_KM, GeoPoint
from sevalink.domain.leaderboards.service import LeaderboardService
from sevalink.domain.leaderboards.sources import InMemoryContributionSource
from sevalink.domain.leaderboards.store import InMemoryLeaderboardStore
from sevalink.domain.matching.models import Candidate, CandidateKind
from sevalink.domain.matching.service import MatchService
from sevalink.domain.matching.sources import InMemoryCandidateSource
from sevalink.main import create_app

MUMBAI = GeoPoint(latitude=19.0760, longitude=72.8777)


def km_north(point: GeoPoint, km: float) -> GeoPoint:
	"""Point exactly ``km`` kilometres north of ``point`` along its meridian."""

	return GeoPoint(latitude=point.latitude + math.degrees(km / EARTH_RADIUS_KM), longitude=point.longitude)


def make_candidate(
	candidate_id: str,
	location: GeoPoint,
	tags: Iterable[str] = (),
	*,
	verified: bool = True,
	kind: CandidateKind = CandidateKind.PROVIDER,
	display_name: Optional[str] = None,
) -> Candidate:
	return Candidate(
		id=candidate_id,
		location=location,
		tags=frozenset(tags),
		verified=verified,
		kind=kind,
		display_name=display_name,
	)


@pytest_asyncio.fixture
async def fake_redis():
	from sevalink.infra.redis import redis_client, set_redis_client

	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture
def candidate_source():
	return InMemoryCandidateSource()


@pytest.fixture
def contribution_source():
	return InMemoryContributionSource()


@pytest.fixture
def leaderboard_service(contribution_source):
	return LeaderboardService(contribution_source, InMemoryLeaderboardStore(), top_n=50)


@pytest_asyncio.fixture
async def api_client(candidate_source, leaderboard_service):
	app = create_app(
		match_service=MatchService(candidate_source),
		leaderboard_service=leaderboard_service,
	)
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
