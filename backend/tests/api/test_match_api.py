import pytest
from httpx import ASGITransport, AsyncClient

from conftest import MUMBAI, km_north, make_candidate
from sevalink.domain.geo.distance import GeoPoint
from sevalink.domain.matching.models import CandidateKind
from sevalink.domain.matching.service import MatchService
from sevalink.domain.matching.sources import CandidateSourceError
from sevalink.main import create_app


def _params(**extra):
    params = {"lat": MUMBAI.latitude, "lng": MUMBAI.longitude}
    params.update(extra)
    return params


@pytest.mark.asyncio
async def test_nearby_organizations_ranks_and_presents(api_client: AsyncClient, candidate_source):
    candidate_source.upsert(make_candidate("1", GeoPoint(19.05, 72.88), ["teaching"], display_name="Akshar"))
    candidate_source.upsert(make_candidate("2", GeoPoint(19.20, 72.90), ["healthcare"]))

    resp = await api_client.get("/match/nearby-organizations", params=_params(radius_km=25, tags="Teaching"))

    assert resp.status_code == 200
    body = resp.json()
    assert [item["id"] for item in body["results"]] == ["1", "2"]
    first = body["results"][0]
    assert first["rank"] == 1
    assert first["name"] == "Akshar"
    assert first["match_score"] == 100
    assert first["matched_tags"] == ["teaching"]
    assert first["distance_km"] == round(first["distance_km"], 1)
    assert 2.5 < first["distance_km"] < 3.5
    assert body["results"][1]["match_score"] == 0
    assert body["meta"]["count"] == 2
    assert body["meta"]["radius_km"] == 25
    assert body["meta"]["kind"] == "provider"


@pytest.mark.asyncio
async def test_nearby_organizations_hides_unverified_and_volunteers(api_client: AsyncClient, candidate_source):
    candidate_source.upsert(make_candidate("org", km_north(MUMBAI, 1)))
    candidate_source.upsert(make_candidate("unverified", km_north(MUMBAI, 1), verified=False))
    candidate_source.upsert(make_candidate("vol", km_north(MUMBAI, 1), kind=CandidateKind.SEEKER))

    resp = await api_client.get("/match/nearby-organizations", params=_params())

    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()["results"]] == ["org"]


@pytest.mark.asyncio
async def test_nearby_organizations_require_tag_match(api_client: AsyncClient, candidate_source):
    candidate_source.upsert(make_candidate("match", km_north(MUMBAI, 5), ["cooking"]))
    candidate_source.upsert(make_candidate("other", km_north(MUMBAI, 1), ["logistics"]))

    resp = await api_client.get(
        "/match/nearby-organizations",
        params=_params(tags="cook", require_tag_match="true"),
    )

    assert [item["id"] for item in resp.json()["results"]] == ["match"]


@pytest.mark.asyncio
async def test_default_radius_applies_when_omitted(api_client: AsyncClient, candidate_source):
    candidate_source.upsert(make_candidate("org", km_north(MUMBAI, 30)))
    candidate_source.upsert(make_candidate("vol", km_north(MUMBAI, 30), kind=CandidateKind.SEEKER))

    orgs = await api_client.get("/match/nearby-organizations", params=_params())
    vols = await api_client.get("/match/nearby-volunteers", params=_params())

    # organizations default to 25 km, volunteers to 50 km
    assert orgs.json()["results"] == []
    assert [item["id"] for item in vols.json()["results"]] == ["vol"]


@pytest.mark.asyncio
async def test_nearby_volunteers_skill_affinity_breaks_near_ties(api_client: AsyncClient, candidate_source):
    candidate_source.upsert(make_candidate("plain", km_north(MUMBAI, 2.0), ["driving"], kind=CandidateKind.SEEKER))
    candidate_source.upsert(
        make_candidate("skilled", km_north(MUMBAI, 2.6), ["first aid", "teaching"], kind=CandidateKind.SEEKER)
    )

    resp = await api_client.get("/match/nearby-volunteers", params=_params(radius_km=10, skills="teaching,first aid"))

    body = resp.json()
    assert [item["id"] for item in body["results"]] == ["skilled", "plain"]
    assert body["meta"]["kind"] == "seeker"


@pytest.mark.asyncio
async def test_oversized_radius_is_clamped(api_client: AsyncClient, candidate_source):
    candidate_source.upsert(make_candidate("far", km_north(MUMBAI, 150)))

    resp = await api_client.get("/match/nearby-organizations", params=_params(radius_km=5000))

    assert resp.status_code == 200
    assert resp.json()["results"] == []
    assert resp.json()["meta"]["radius_km"] == 100


@pytest.mark.asyncio
async def test_zero_radius_is_empty_not_an_error(api_client: AsyncClient, candidate_source):
    candidate_source.upsert(make_candidate("here", MUMBAI))

    resp = await api_client.get("/match/nearby-organizations", params=_params(radius_km=0))

    assert resp.status_code == 200
    assert resp.json()["results"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"lat": 91, "lng": 72.8},
        {"lat": 19.0, "lng": -181},
        {"lat": 19.0, "lng": 72.8, "radius_km": -1},
        {"lat": 19.0, "lng": 72.8, "limit": 0},
        {"lng": 72.8},
    ],
)
async def test_invalid_queries_are_rejected(api_client: AsyncClient, params):
    resp = await api_client.get("/match/nearby-organizations", params=params)

    assert resp.status_code == 422
    body = resp.json()
    assert body["detail"] == "validation_error"
    assert body["request_id"]


@pytest.mark.asyncio
async def test_too_many_tags_are_rejected(api_client: AsyncClient):
    tags = ",".join(f"tag{i}" for i in range(25))

    resp = await api_client.get("/match/nearby-organizations", params=_params(tags=tags))

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_candidate_store_outage_maps_to_503(leaderboard_service):
    class _Down:
        async def fetch_candidates_near(self, point, radius_km, kind):
            raise CandidateSourceError("redis down")

    app = create_app(match_service=MatchService(_Down()), leaderboard_service=leaderboard_service)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        resp = await client.get("/match/nearby-organizations", params=_params(), headers={"X-Request-Id": "rid-42"})

    assert resp.status_code == 503
    assert resp.json()["request_id"] == "rid-42"
    assert resp.headers["X-Request-Id"] == "rid-42"
