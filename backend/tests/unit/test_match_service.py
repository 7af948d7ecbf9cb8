import pytest

from conftest import MUMBAI, km_north, make_candidate
from sevalink.domain.matching.models import CandidateKind, MatchQuery
from sevalink.domain.matching.service import MatchService
from sevalink.domain.matching.sources import CandidateSourceError, InMemoryCandidateSource


class _CountingSource(InMemoryCandidateSource):
	def __init__(self, candidates=()):
		super().__init__(candidates)
		self.calls = []

	async def fetch_candidates_near(self, point, radius_km, kind):
		self.calls.append((point, radius_km, kind))
		return await super().fetch_candidates_near(point, radius_km, kind)


class _BrokenSource:
	async def fetch_candidates_near(self, point, radius_km, kind):
		raise CandidateSourceError("down")


def _query(**overrides):
	params = dict(point=MUMBAI, radius_km=25, kind=CandidateKind.PROVIDER)
	params.update(overrides)
	return MatchQuery(**params)


@pytest.mark.asyncio
async def test_unverified_candidates_are_excluded_by_default():
	source = InMemoryCandidateSource(
		[
			make_candidate("ok", km_north(MUMBAI, 1)),
			make_candidate("pending", km_north(MUMBAI, 0.5), verified=False),
		]
	)
	service = MatchService(source)

	results = await service.find_matches(_query())
	assert [r.candidate_id for r in results] == ["ok"]

	everyone = await service.find_matches(_query(verified_only=False))
	assert [r.candidate_id for r in everyone] == ["pending", "ok"]


@pytest.mark.asyncio
async def test_only_requested_kind_is_returned():
	source = InMemoryCandidateSource(
		[
			make_candidate("org", km_north(MUMBAI, 1), kind=CandidateKind.PROVIDER),
			make_candidate("vol", km_north(MUMBAI, 1), kind=CandidateKind.SEEKER),
		]
	)
	service = MatchService(source)

	orgs = await service.find_matches(_query(kind=CandidateKind.PROVIDER))
	vols = await service.find_matches(_query(kind=CandidateKind.SEEKER))

	assert [r.candidate_id for r in orgs] == ["org"]
	assert [r.candidate_id for r in vols] == ["vol"]


@pytest.mark.asyncio
async def test_require_tag_match_drops_candidates_without_overlap():
	source = InMemoryCandidateSource(
		[
			make_candidate("tutor", km_north(MUMBAI, 3), ["teaching"]),
			make_candidate("nurse", km_north(MUMBAI, 1), ["healthcare"]),
		]
	)
	service = MatchService(source)

	soft = await service.find_matches(_query(required_tags=frozenset({"teaching"})))
	strict = await service.find_matches(_query(required_tags=frozenset({"teaching"}), require_tag_match=True))

	assert [r.candidate_id for r in soft] == ["nurse", "tutor"]
	assert [r.candidate_id for r in strict] == ["tutor"]
	assert strict[0].matched_tags == ("teaching",)


@pytest.mark.asyncio
async def test_degenerate_queries_skip_the_source():
	source = _CountingSource([make_candidate("here", MUMBAI, ["teaching"])])
	service = MatchService(source)

	assert await service.find_matches(_query(radius_km=0)) == []
	assert await service.find_matches(_query(require_tag_match=True)) == []
	assert source.calls == []


@pytest.mark.asyncio
async def test_radius_is_clamped_before_fetching():
	source = _CountingSource([make_candidate("far", km_north(MUMBAI, 80))])
	service = MatchService(source, max_radius_km=50)

	search = await service.search(_query(radius_km=500))

	assert search.radius_km == 50
	assert source.calls[0][1] == 50
	assert search.results == []


@pytest.mark.asyncio
async def test_search_exposes_candidate_records_for_results():
	source = InMemoryCandidateSource(
		[make_candidate("a", km_north(MUMBAI, 2), ["teaching"], display_name="Akshar Trust")]
	)
	service = MatchService(source)

	search = await service.search(_query(required_tags=frozenset({"teach"})))

	assert list(search.candidates) == ["a"]
	assert search.candidates["a"].display_name == "Akshar Trust"
	assert search.results[0].affinity_score == 1.0


@pytest.mark.asyncio
async def test_limit_is_applied():
	source = InMemoryCandidateSource([make_candidate(f"c{i}", km_north(MUMBAI, i + 1)) for i in range(10)])
	service = MatchService(source)

	results = await service.find_matches(_query(limit=3))

	assert [r.candidate_id for r in results] == ["c0", "c1", "c2"]


@pytest.mark.asyncio
async def test_source_errors_propagate():
	service = MatchService(_BrokenSource())
	with pytest.raises(CandidateSourceError):
		await service.find_matches(_query())
