import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_reports_injected_backends(api_client: AsyncClient):
    resp = await api_client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["candidate_backend"] == "injected"
    assert body["leaderboard_backend"] == "injected"


@pytest.mark.asyncio
async def test_request_id_is_echoed(api_client: AsyncClient):
    resp = await api_client.get("/health", headers={"X-Request-Id": "abc-123"})
    assert resp.headers["X-Request-Id"] == "abc-123"

    generated = await api_client.get("/health")
    assert generated.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_metrics_endpoint_exposes_match_counters(api_client: AsyncClient):
    await api_client.get("/match/nearby-organizations", params={"lat": 19.0, "lng": 72.8})

    resp = await api_client.get("/metrics")

    assert resp.status_code == 200
    assert "sevalink_match_queries_total" in resp.text
