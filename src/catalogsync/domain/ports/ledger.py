"""Ports for the staff-authored product ledger (desired state)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from catalogsync.domain.model import DesiredProduct


@runtime_checkable
class ProductLedger(Protocol):
    """Reads desired products and records platform identifiers back onto rows."""

    def read_desired_products(self) -> list[DesiredProduct]:
        """Return every row with a non-empty name, paging through the whole table."""
        ...

    def write_platform_ids(
        self,
        row_id: str,
        *,
        product_id: str,
        price_id: str | None,
    ) -> None: ...


__all__ = ["ProductLedger"]
