"""Google Maps MCP server.

Pure passthrough: validated arguments go to the Maps web services and the
JSON response is relayed unchanged.
"""

import asyncio
import logging
import sys
from typing import Any, Literal

from pydantic import BaseModel, Field

from colab_maps_mcp.config import ConfigurationError, MapsSettings, load_environment
from colab_maps_mcp.maps import MapsClient
from colab_maps_mcp.server.base import ToolHandler, ToolServer, ToolSpec

logger = logging.getLogger(__name__)

SERVER_NAME = "google-maps-mcp"

TravelMode = Literal["driving", "walking", "bicycling", "transit"]

_MODE_DESCRIPTION = "Mode of transport (driving, walking, bicycling, transit). Default: driving"


class GeocodeArgs(BaseModel):
    address: str = Field(..., min_length=1, description="The street address to geocode.")


class ReverseGeocodeArgs(BaseModel):
    lat: float = Field(..., ge=-90, le=90, description="The latitude.")
    lng: float = Field(..., ge=-180, le=180, description="The longitude.")


class DirectionsArgs(BaseModel):
    origin: str = Field(..., min_length=1, description="The starting address or place ID.")
    destination: str = Field(
        ..., min_length=1, description="The destination address or place ID."
    )
    mode: TravelMode | None = Field(default=None, description=_MODE_DESCRIPTION)


class DistanceMatrixArgs(BaseModel):
    origins: list[str] = Field(
        ..., min_length=1, description="Starting addresses or place IDs."
    )
    destinations: list[str] = Field(
        ..., min_length=1, description="Destination addresses or place IDs."
    )
    mode: TravelMode | None = Field(default=None, description=_MODE_DESCRIPTION)


TOOL_SPECS = [
    ToolSpec(
        name="geocode",
        description="Convert an address into geographic coordinates (latitude/longitude).",
        arguments=GeocodeArgs,
    ),
    ToolSpec(
        name="reverse_geocode",
        description=(
            "Convert geographic coordinates (latitude/longitude) into a human-readable address."
        ),
        arguments=ReverseGeocodeArgs,
    ),
    ToolSpec(
        name="get_directions",
        description="Get directions between two locations.",
        arguments=DirectionsArgs,
    ),
    ToolSpec(
        name="get_distance_matrix",
        description=(
            "Calculate travel time and distance between multiple origins and destinations."
        ),
        arguments=DistanceMatrixArgs,
    ),
]


class MapsServer(ToolServer):
    """MCP server for the Google Maps Platform.

    Attributes:
        settings: API key configuration.
        client: MapsClient used for all requests.
    """

    def __init__(self, settings: MapsSettings, client: MapsClient | None = None) -> None:
        self.settings = settings
        self.client = client or MapsClient(settings.api_key)
        super().__init__(SERVER_NAME)

    def tool_specs(self) -> list[ToolSpec]:
        return TOOL_SPECS

    def tool_handlers(self) -> dict[str, ToolHandler]:
        return {
            "geocode": self._geocode,
            "reverse_geocode": self._reverse_geocode,
            "get_directions": self._get_directions,
            "get_distance_matrix": self._get_distance_matrix,
        }

    async def close(self) -> None:
        await self.client.close()

    async def _geocode(self, args: GeocodeArgs) -> dict[str, Any]:
        return await self.client.geocode(args.address)

    async def _reverse_geocode(self, args: ReverseGeocodeArgs) -> dict[str, Any]:
        return await self.client.reverse_geocode(args.lat, args.lng)

    async def _get_directions(self, args: DirectionsArgs) -> dict[str, Any]:
        return await self.client.directions(args.origin, args.destination, args.mode)

    async def _get_distance_matrix(self, args: DistanceMatrixArgs) -> dict[str, Any]:
        return await self.client.distance_matrix(args.origins, args.destinations, args.mode)


def main() -> None:
    """Entry point for the Maps MCP server."""
    load_environment()
    try:
        settings = MapsSettings.from_env()
    except ConfigurationError as e:
        logger.error(f"Failed to start {SERVER_NAME}: {e}")
        sys.exit(1)

    server = MapsServer(settings)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
