"""
OSRM route client.

Talks to the public OSRM ``/route`` service over HTTP and normalises the
first route into a ``Route``.  Endpoints are tried in order; the client
raises ``RoutingError`` only once every endpoint has failed.

OSRM wants ``lng,lat`` pairs; everything inside the engine is
``Location(latitude, longitude)``.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from tripnav.config import settings
from tripnav.domain.entities import Location, Route
from tripnav.domain.errors import RoutingError

logger = logging.getLogger(__name__)

ROUTE_PARAMS = {
    "geometries": "geojson",
    "overview": "full",
    "steps": "false",
    "alternatives": "false",
}


def format_coordinates(points: Sequence[Location]) -> str:
    """Convert locations to OSRM's ``lng,lat;lng,lat`` path segment."""
    return ";".join("%s,%s" % p.as_lng_lat() for p in points)


class OSRMClient:
    def __init__(
        self,
        endpoints: Optional[Sequence[str]] = None,
        *,
        profile: str = "driving",
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if endpoints is None:
            endpoints = settings.osrm_endpoints
        self.endpoints = [e.rstrip("/") for e in endpoints]
        if not self.endpoints:
            raise ValueError("At least one OSRM endpoint is required")
        self.profile = profile
        self.timeout = settings.osrm_timeout_seconds if timeout is None else timeout
        self._client = client or httpx.AsyncClient(
            timeout=self.timeout,
            headers={"Accept": "application/json", "User-Agent": "tripnav/1.0"},
        )
        self._owns_client = client is None

    async def route(self, origin: Location, destination: Location) -> Route:
        last_error: Optional[Exception] = None
        path = format_coordinates([origin, destination])

        for endpoint in self.endpoints:
            url = f"{endpoint}/route/v1/{self.profile}/{path}"
            try:
                response = await self._client.get(url, params=ROUTE_PARAMS)
                response.raise_for_status()
                data = response.json()
                if data.get("code") != "Ok" or not data.get("routes"):
                    raise RoutingError(
                        data.get("message") or "No route found between the specified locations"
                    )
            except (httpx.HTTPError, ValueError, RoutingError) as exc:
                logger.warning("OSRM endpoint %s failed: %s", endpoint, exc)
                last_error = exc
                continue

            best = data["routes"][0]
            return Route(
                origin=origin,
                destination=destination,
                distance_m=float(best["distance"]),
                duration_s=float(best["duration"]),
                geometry=best.get("geometry") or {},
            )

        raise RoutingError(
            f"Failed to calculate route: {last_error or 'all routing services unavailable'}"
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
