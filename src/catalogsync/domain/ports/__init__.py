"""Domain port definitions for adapters."""

from __future__ import annotations

from .images import FolderImageSource, ImageGenerator
from .ledger import ProductLedger
from .platform import CommercePlatform
from .run_log import RunLock, RunLogStore

__all__ = [
    "CommercePlatform",
    "FolderImageSource",
    "ImageGenerator",
    "ProductLedger",
    "RunLock",
    "RunLogStore",
]
