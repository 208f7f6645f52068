"""OSRM client tests against an in-process httpx mock transport."""

import httpx
import pytest

from tripnav.domain.errors import RoutingError
from tripnav.infrastructure.osrm_client import OSRMClient, format_coordinates
from tests.conftest import DESTINATION, PICKUP

PRIMARY = "https://primary.test"
FALLBACK = "https://fallback.test"

OK_BODY = {
    "code": "Ok",
    "routes": [
        {
            "distance": 9412.3,
            "duration": 1288.9,
            "geometry": {"type": "LineString", "coordinates": [[-73.9851, 40.7589]]},
        }
    ],
}


def _client(handler, endpoints=(PRIMARY, FALLBACK)):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OSRMClient(endpoints, client=http), http


def test_format_coordinates_is_lng_lat():
    assert format_coordinates([PICKUP, DESTINATION]) == "-73.9851,40.7589;-74.0445,40.6892"


def test_requires_an_endpoint():
    with pytest.raises(ValueError):
        OSRMClient([])


@pytest.mark.asyncio
async def test_route_parses_first_route():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json=OK_BODY)

    client, http = _client(handler)
    route = await client.route(PICKUP, DESTINATION)
    await http.aclose()

    assert route.distance_m == pytest.approx(9412.3)
    assert route.duration_s == pytest.approx(1288.9)
    assert route.origin == PICKUP
    assert route.geometry["type"] == "LineString"
    assert seen[0].path == "/route/v1/driving/-73.9851,40.7589;-74.0445,40.6892"
    assert seen[0].params["geometries"] == "geojson"


@pytest.mark.asyncio
async def test_falls_back_to_next_endpoint():
    hosts = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        if request.url.host == "primary.test":
            return httpx.Response(503)
        return httpx.Response(200, json=OK_BODY)

    client, http = _client(handler)
    route = await client.route(PICKUP, DESTINATION)
    await http.aclose()

    assert hosts == ["primary.test", "fallback.test"]
    assert route.distance_m == pytest.approx(9412.3)


@pytest.mark.asyncio
async def test_no_route_counts_as_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "primary.test":
            return httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route"})
        return httpx.Response(200, json=OK_BODY)

    client, http = _client(handler)
    route = await client.route(PICKUP, DESTINATION)
    await http.aclose()
    assert route.duration_s == pytest.approx(1288.9)


@pytest.mark.asyncio
async def test_all_endpoints_failing_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, http = _client(handler)
    with pytest.raises(RoutingError, match="Failed to calculate route"):
        await client.route(PICKUP, DESTINATION)
    await http.aclose()


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open():
    client, http = _client(lambda request: httpx.Response(200, json=OK_BODY))
    await client.aclose()
    assert not http.is_closed
    await http.aclose()
