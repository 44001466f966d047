"""Read-only snapshot of the platform catalog used for planning."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogsync.domain.model import ActualPrice, ActualProduct
    from catalogsync.domain.ports import CommercePlatform

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    products: tuple[ActualProduct, ...]
    prices: tuple[ActualPrice, ...]


def read_catalog_snapshot(platform: CommercePlatform) -> CatalogSnapshot:
    """Enumerate every product and price; any failed page propagates."""

    products = platform.list_products()
    prices = platform.list_prices()
    log.info("Read platform catalog: products=%s, prices=%s", len(products), len(prices))
    return CatalogSnapshot(products=tuple(products), prices=tuple(prices))
