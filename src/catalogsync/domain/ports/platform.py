"""Ports for the commerce platform (actual state)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from catalogsync.domain.model import ActualPrice, ActualProduct, PriceSpec, ProductSpec


@runtime_checkable
class CommercePlatform(Protocol):
    """Product/price operations the reconciler needs from the platform.

    Prices are create-only: there is deliberately no update operation for them.
    """

    def list_products(self) -> list[ActualProduct]:
        """Return all products, active and inactive, across every page."""
        ...

    def list_prices(self, *, product_id: str | None = None) -> list[ActualPrice]:
        """Return all prices, optionally restricted to one product, across every page."""
        ...

    def retrieve_product(self, product_id: str) -> ActualProduct | None:
        """Return the product or ``None`` when the platform does not know the id."""
        ...

    def create_product(self, spec: ProductSpec) -> ActualProduct: ...

    def update_product(self, product_id: str, spec: ProductSpec) -> ActualProduct: ...

    def create_price(self, product_id: str, spec: PriceSpec) -> ActualPrice: ...

    def set_default_price(self, product_id: str, price_id: str) -> ActualProduct: ...

    def set_images(self, product_id: str, image_urls: list[str]) -> ActualProduct: ...

    def upload_image(self, data: bytes, *, filename: str) -> str:
        """Upload image bytes and return a URL usable as a product image reference."""
        ...

    def download_image(self, url: str) -> bytes: ...


__all__ = ["CommercePlatform"]
