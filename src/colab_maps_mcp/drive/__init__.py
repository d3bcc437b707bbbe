"""Google Drive document store."""

from colab_maps_mcp.drive.store import DRIVE_API_BASE, FOLDER_MIME_TYPE, DriveStore

__all__ = ["DRIVE_API_BASE", "DriveStore", "FOLDER_MIME_TYPE"]
