"""Reconciliation run defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ConfigurationError

DEFAULT_LOCK_NAME = "catalog-reconciliation"
DEFAULT_LOCK_TTL_SECONDS = 15 * 60
DEFAULT_STATEMENT_DESCRIPTOR = "MESSY MAGNETIC"


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    lock_name: str = DEFAULT_LOCK_NAME
    lock_ttl_seconds: float = DEFAULT_LOCK_TTL_SECONDS
    default_statement_descriptor: str = DEFAULT_STATEMENT_DESCRIPTOR


def get_reconcile_config() -> ReconcileConfig:
    ttl_raw = os.getenv("CATALOGSYNC_LOCK_TTL_SECONDS")
    try:
        ttl = float(ttl_raw) if ttl_raw else DEFAULT_LOCK_TTL_SECONDS
    except ValueError as exc:
        raise ConfigurationError(f"Invalid CATALOGSYNC_LOCK_TTL_SECONDS: {ttl_raw}") from exc
    if ttl <= 0:
        raise ConfigurationError("CATALOGSYNC_LOCK_TTL_SECONDS must be positive")
    return ReconcileConfig(
        lock_ttl_seconds=ttl,
        default_statement_descriptor=os.getenv("CATALOGSYNC_STATEMENT_DESCRIPTOR")
        or DEFAULT_STATEMENT_DESCRIPTOR,
    )
