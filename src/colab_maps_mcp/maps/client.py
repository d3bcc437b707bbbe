"""Google Maps Platform web service client.

Thin passthrough: each method forwards its parameters plus the API key and
returns the JSON body unchanged. The Maps web services report most
failures in-band with HTTP 200 and a non-OK "status" field, so the status
is checked here as well as the HTTP code.
"""

import logging
from typing import Any

import httpx

from colab_maps_mcp.errors import NotFoundError, TransientProviderError

logger = logging.getLogger(__name__)

MAPS_API_BASE = "https://maps.googleapis.com/maps/api"

# Statuses that carry a usable (possibly empty) result
_SUCCESS_STATUSES = frozenset({"OK", "ZERO_RESULTS"})


class MapsClient:
    """Async client for the geocoding, directions and distance matrix APIs.

    Attributes:
        api_key: Maps Platform API key added to every request.
    """

    def __init__(self, api_key: str, http_client: httpx.AsyncClient | None = None) -> None:
        self.api_key = api_key
        self._http_client = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                http2=True,
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        """Call a Maps JSON endpoint.

        Args:
            endpoint: API name, e.g. "geocode" or "directions".
            params: Query parameters without the key.

        Returns:
            The JSON response body.

        Raises:
            NotFoundError: If the API reports NOT_FOUND.
            TransientProviderError: On any other non-OK status or HTTP failure.
        """
        client = await self._get_http_client()
        query = {k: v for k, v in params.items() if v is not None}
        query["key"] = self.api_key

        try:
            response = await client.get(f"{MAPS_API_BASE}/{endpoint}/json", params=query)
            response.raise_for_status()
            body: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as e:
            raise TransientProviderError(
                f"Google Maps API Error: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TransientProviderError(f"Google Maps API Error: {e}") from e

        status = body.get("status", "OK")
        if status in _SUCCESS_STATUSES:
            return body

        message = body.get("error_message") or status
        logger.warning(f"Maps {endpoint} returned {status}: {message}")
        if status == "NOT_FOUND":
            subject = params.get("origin") or params.get("address") or endpoint
            raise NotFoundError(str(subject), message)
        raise TransientProviderError(f"Google Maps API Error: {message}")

    async def geocode(self, address: str) -> dict[str, Any]:
        """Convert an address into coordinates."""
        return await self._get("geocode", {"address": address})

    async def reverse_geocode(self, lat: float, lng: float) -> dict[str, Any]:
        """Convert coordinates into addresses."""
        return await self._get("geocode", {"latlng": f"{lat},{lng}"})

    async def directions(
        self, origin: str, destination: str, mode: str | None = None
    ) -> dict[str, Any]:
        """Get directions between two locations."""
        return await self._get(
            "directions", {"origin": origin, "destination": destination, "mode": mode}
        )

    async def distance_matrix(
        self,
        origins: list[str],
        destinations: list[str],
        mode: str | None = None,
    ) -> dict[str, Any]:
        """Get travel distance and time for each origin/destination pair."""
        return await self._get(
            "distancematrix",
            {
                "origins": "|".join(origins),
                "destinations": "|".join(destinations),
                "mode": mode,
            },
        )
