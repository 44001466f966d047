"""Read-only drift report between the ledger and the platform."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalogsync.domain.normalize import name_key

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import ActualProduct, DesiredProduct


@dataclass(frozen=True, slots=True)
class MissingRecord:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class FieldMismatch:
    product_id: str
    field: str
    ledger: object
    platform: object


@dataclass(frozen=True, slots=True)
class AuditReport:
    missing_in_ledger: list[MissingRecord] = field(default_factory=list[MissingRecord])
    missing_in_platform: list[MissingRecord] = field(default_factory=list[MissingRecord])
    field_mismatches: list[FieldMismatch] = field(default_factory=list[FieldMismatch])
    duplicate_linkage: list[str] = field(default_factory=list[str])

    @property
    def has_drift(self) -> bool:
        return bool(
            self.missing_in_ledger
            or self.missing_in_platform
            or self.field_mismatches
            or self.duplicate_linkage
        )


def audit_catalog(
    desired: Sequence[DesiredProduct],
    products: Sequence[ActualProduct],
) -> AuditReport:
    """Cross-reference both sides by platform id and by name."""

    rows_by_platform_id: dict[str, DesiredProduct] = {}
    rows_by_name: dict[str, DesiredProduct] = {}
    for row in desired:
        if row.platform_product_id:
            rows_by_platform_id.setdefault(row.platform_product_id, row)
        rows_by_name.setdefault(name_key(row.name), row)
    product_names = {name_key(product.name) for product in products}

    missing_in_ledger: list[MissingRecord] = []
    mismatches: list[FieldMismatch] = []
    for product in products:
        row = rows_by_platform_id.get(product.id) or rows_by_name.get(name_key(product.name))
        if row is None:
            missing_in_ledger.append(MissingRecord(id=product.id, name=product.name))
            continue
        mismatches.extend(_field_mismatches(row, product))

    missing_in_platform = [
        MissingRecord(id=row.id, name=row.name)
        for row in desired
        if not row.platform_product_id and name_key(row.name) not in product_names
    ]

    linkage = Counter(row.platform_product_id for row in desired if row.platform_product_id)
    duplicates = sorted(product_id for product_id, count in linkage.items() if count > 1)

    return AuditReport(
        missing_in_ledger=missing_in_ledger,
        missing_in_platform=missing_in_platform,
        field_mismatches=mismatches,
        duplicate_linkage=duplicates,
    )


def _field_mismatches(row: DesiredProduct, product: ActualProduct) -> list[FieldMismatch]:
    pairs: tuple[tuple[str, object, object], ...] = (
        ("description", row.description, product.description or ""),
        ("name", row.name, product.name),
        ("active", row.active, product.active),
    )
    return [
        FieldMismatch(product_id=product.id, field=name, ledger=ledger, platform=platform)
        for name, ledger, platform in pairs
        if ledger != platform
    ]
