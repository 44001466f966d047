"""Google Drive adapter for staff-provided product images."""

from __future__ import annotations

from .client import DriveAPIError, DriveImageSource, extract_folder_id

__all__ = ["DriveAPIError", "DriveImageSource", "extract_folder_id"]
