"""Catalog reconciliation: snapshot, plan, execute, audit.

Flow of one run:
1) read desired products from the ledger and the platform catalog snapshot
2) plan the actions each desired product still needs (pure)
3) optionally execute each plan item as an isolated unit of work
4) write platform ids back to the ledger and append a run record
"""

from __future__ import annotations

from .audit import AuditReport, FieldMismatch, MissingRecord, audit_catalog
from .engine import CatalogReconciler, ItemResult, PlanReport, RunResult
from .plan import NEW_PRODUCT_ACTIONS, PlanItem, PlanSummary, build_plan, summarize
from .snapshot import CatalogSnapshot, read_catalog_snapshot

__all__ = [
    "NEW_PRODUCT_ACTIONS",
    "AuditReport",
    "CatalogReconciler",
    "CatalogSnapshot",
    "FieldMismatch",
    "ItemResult",
    "MissingRecord",
    "PlanItem",
    "PlanReport",
    "PlanSummary",
    "RunResult",
    "audit_catalog",
    "build_plan",
    "read_catalog_snapshot",
    "summarize",
]
