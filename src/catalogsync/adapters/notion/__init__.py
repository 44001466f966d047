"""Notion adapter: the ledger holding staff-authored desired product state."""

from __future__ import annotations

from .client import NotionAPIError, NotionClient
from .ledger import NotionLedger
from .translator import RowReader, find_column, parse_desired_product

__all__ = [
    "NotionAPIError",
    "NotionClient",
    "NotionLedger",
    "RowReader",
    "find_column",
    "parse_desired_product",
]
