"""MCP servers for Colab notebooks and Google Maps.

Colab Tools (5):
- list_files, read_file, write_file: Drive file access
- insert_code_cell, replace_code_cell: notebook cell editing

Maps Tools (4):
- geocode, reverse_geocode
- get_directions, get_distance_matrix

Transport: Stdio
Authentication: OAuth 2.0 refresh token (Colab), API key (Maps)
"""

from colab_maps_mcp.server.colab_server import ColabServer
from colab_maps_mcp.server.maps_server import MapsServer

__all__ = ["ColabServer", "MapsServer"]
