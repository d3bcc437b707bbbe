"""Google Maps Platform client."""

from colab_maps_mcp.maps.client import MAPS_API_BASE, MapsClient

__all__ = ["MAPS_API_BASE", "MapsClient"]
