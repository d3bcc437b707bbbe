"""Colab & Maps MCP servers.

Expose Colab notebooks stored on Google Drive and the Google Maps Platform
web services as MCP tools.
"""

from colab_maps_mcp.__version__ import __version__

__all__ = ["__version__"]
