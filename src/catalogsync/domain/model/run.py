"""Operational log records for reconciliation runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from .enums import RunMode


@dataclass(eq=False, kw_only=True)
class RunRecord:
    mode: RunMode
    dry_run: bool
    item_count: int = 0
    created_count: int = 0
    updated_count: int = 0
    failed_count: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    finished_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)
