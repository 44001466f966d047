"""Normalization of ledger-authored values into canonical catalog values."""

from __future__ import annotations

import json
import re
from typing import Final

MINOR_UNIT_THRESHOLD: Final[int] = 1000
STATEMENT_DESCRIPTOR_MAX_LENGTH: Final[int] = 22

_DESCRIPTOR_DISALLOWED = re.compile(r"[^A-Z0-9 ]")
_METADATA_SEPARATORS = re.compile(r"[\n,]")


def normalize_unit_amount(raw: float | None) -> int:
    """Return ``raw`` as an integer amount of minor currency units.

    Values below ``MINOR_UNIT_THRESHOLD`` are read as whole currency units
    (``25`` -> ``2500``); anything at or above it is taken as already minor units.
    A minor-unit value under the threshold (``900`` meaning $9.00) is therefore
    multiplied again. The ledger has no units column to disambiguate.
    """

    if raw is None:
        return 0
    if raw < MINOR_UNIT_THRESHOLD:
        return round(raw * 100)
    return round(raw)


def sanitize_statement_descriptor(value: str) -> str:
    """Uppercase, keep only ``[A-Z0-9 ]``, truncate to 22 characters and trim."""

    cleaned = _DESCRIPTOR_DISALLOWED.sub("", value.upper())
    return cleaned[:STATEMENT_DESCRIPTOR_MAX_LENGTH].strip()


def parse_metadata(text: str | None) -> dict[str, str]:
    """Parse a free-text metadata cell.

    A JSON object is used as-is (values stringified). Otherwise the text is split on
    newlines and commas and each ``key: value`` fragment is kept. Fragments without a
    colon, key or value are dropped.
    """

    if text is None or not text.strip():
        return {}
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError:
        decoded = None
    if isinstance(decoded, dict):
        return {
            str(key): _metadata_value(value)
            for key, value in decoded.items()
            if value not in (None, "")
        }

    metadata: dict[str, str] = {}
    for fragment in _METADATA_SEPARATORS.split(text):
        key, sep, value = fragment.partition(":")
        key = key.strip()
        value = value.strip()
        if not sep or not key or not value:
            continue
        metadata[key] = value
    return metadata


def _metadata_value(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def name_key(name: str | None) -> str:
    """Matching key for product names: trimmed and case-insensitive."""

    return (name or "").strip().casefold()


def canonical_metadata(metadata: dict[str, str] | None) -> str:
    """Order-independent serialization used for metadata equality."""

    return json.dumps(metadata or {}, sort_keys=True, separators=(",", ":"))
