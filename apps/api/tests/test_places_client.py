from __future__ import annotations

import httpx
import pytest

from geo_engine.models import GeoPoint
from live_location.errors import SearchFailedError

from api.clients.places_client import GooglePlacesClient

ORIGIN = GeoPoint(lat=17.385, lng=78.4867)


def build_client(handler):
    transport = httpx.MockTransport(handler)
    return GooglePlacesClient(
        api_key="test-key",
        base_url="https://places.example.com/maps/api/place",
        timeout_seconds=5.0,
        client_factory=lambda: httpx.AsyncClient(transport=transport, timeout=5.0),
    )


async def _search(client: GooglePlacesClient):
    return await client.search(ORIGIN, radius_meters=15_000, category="hospital", keyword="multi specialty hospital")


@pytest.mark.asyncio
async def test_places_client_sends_nearby_search_parameters() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(status_code=200, json={"status": "OK", "results": []})

    await _search(build_client(handler))

    assert seen["path"] == "/maps/api/place/nearbysearch/json"
    assert seen["params"] == {
        "location": "17.385,78.4867",
        "radius": "15000",
        "type": "hospital",
        "keyword": "multi specialty hospital",
        "key": "test-key",
    }


@pytest.mark.asyncio
async def test_places_client_maps_rows_and_keeps_invalid_ones_as_incomplete() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=200,
            json={
                "status": "OK",
                "results": [
                    {
                        "place_id": "p1",
                        "name": "Apollo Hospital",
                        "vicinity": "Jubilee Hills",
                        "geometry": {"location": {"lat": 17.4201, "lng": 78.4116}},
                    },
                    {"place_id": "p2", "name": "No geometry"},
                    {"name": "No id", "geometry": {"location": {"lat": 17.4, "lng": 78.4}}},
                    {"place_id": "p4", "geometry": {"location": {"lat": 123.0, "lng": 78.4}}},
                    "not-a-row",
                ],
            },
        )

    rows = await _search(build_client(handler))

    assert len(rows) == 4
    assert rows[0].id == "p1"
    assert rows[0].location == GeoPoint(lat=17.4201, lng=78.4116)
    assert rows[0].address == "Jubilee Hills"
    assert rows[1].location is None
    assert rows[2].id is None
    assert rows[3].location is None


@pytest.mark.asyncio
async def test_places_client_treats_zero_results_as_empty() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"status": "ZERO_RESULTS", "results": []})

    assert await _search(build_client(handler)) == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(status_code=503, json={"message": "down"}),
        httpx.Response(status_code=200, json={"status": "OVER_QUERY_LIMIT"}),
        httpx.Response(status_code=200, json={"status": "OK", "results": "nope"}),
        httpx.Response(status_code=200, content=b"<html>oops</html>"),
        httpx.Response(status_code=200, json=["unexpected"]),
    ],
)
async def test_places_client_raises_search_failed(response: httpx.Response) -> None:
    client = build_client(lambda _: response)
    with pytest.raises(SearchFailedError):
        await _search(client)


@pytest.mark.asyncio
async def test_places_client_maps_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(SearchFailedError) as exc_info:
        await _search(build_client(handler))

    assert "timed out" in str(exc_info.value)
