"""Idempotent write primitives against the commerce platform."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.normalize import canonical_metadata

if TYPE_CHECKING:
    from catalogsync.domain.model import ActualPrice, ActualProduct, PriceSpec, ProductSpec
    from catalogsync.domain.ports import CommercePlatform

log = getLogger(__name__)

DEFAULT_IMAGE_FILENAME = "image.jpg"


@dataclass(slots=True)
class CatalogWriter:
    """Create-or-converge operations; repeating a call with the same input is a no-op."""

    platform: CommercePlatform
    _uploaded: dict[str, str] = field(default_factory=dict[str, str], repr=False)

    def ensure_product(self, spec: ProductSpec) -> ActualProduct:
        """Find the product by id, then by exact name; update it or create it."""

        product: ActualProduct | None = None
        if spec.id:
            product = self.platform.retrieve_product(spec.id)
            if product is None:
                log.warning("Platform product %s not found; falling back to name lookup", spec.id)
        if product is None:
            product = next(
                (item for item in self.platform.list_products() if item.name == spec.name),
                None,
            )
        if product is None:
            created = self.platform.create_product(spec)
            log.info("Created product %s (%s)", created.id, created.name)
            return created
        if _product_matches(product, spec):
            return product
        updated = self.platform.update_product(product.id, spec)
        log.info("Updated product %s (%s)", updated.id, updated.name)
        return updated

    def ensure_price(self, product_id: str, spec: PriceSpec) -> ActualPrice:
        """Return an existing price with the same identity tuple or create a new one."""

        for price in self.platform.list_prices(product_id=product_id):
            if spec.matches(price):
                return price
        created = self.platform.create_price(product_id, spec)
        log.info(
            "Created price %s for product %s: %s %s interval=%s",
            created.id,
            product_id,
            spec.unit_amount,
            spec.currency,
            spec.interval,
        )
        return created

    def set_default_price(self, product_id: str, price_id: str) -> ActualProduct | None:
        """Point the product's default price at ``price_id``; ``None`` if already set."""

        product = self.platform.retrieve_product(product_id)
        if product is not None and product.default_price_id == price_id:
            return None
        updated = self.platform.set_default_price(product_id, price_id)
        log.info("Set default price of %s to %s", product_id, price_id)
        return updated

    def attach_image(
        self,
        product_id: str,
        image: bytes | str,
        *,
        filename: str = DEFAULT_IMAGE_FILENAME,
    ) -> ActualProduct:
        """Make ``image`` the product's only image.

        Bytes are uploaded first; a string is treated as an already hosted URL.
        """

        if isinstance(image, str):
            url = image
        else:
            digest = hashlib.sha256(image).hexdigest()
            url = self._uploaded.get(digest)
            if url is None:
                url = self.platform.upload_image(image, filename=filename)
                self._uploaded[digest] = url
        product = self.platform.retrieve_product(product_id)
        if product is not None and product.images == (url,):
            return product
        updated = self.platform.set_images(product_id, [url])
        log.info("Attached image to product %s", product_id)
        return updated


def _product_matches(product: ActualProduct, spec: ProductSpec) -> bool:
    return (
        product.name == spec.name
        and (product.description or "") == spec.description
        and product.active == spec.active
        and (product.statement_descriptor or None) == spec.statement_descriptor
        and (spec.tax_code is None or product.tax_code == spec.tax_code)
        and canonical_metadata(product.metadata) == canonical_metadata(spec.metadata)
    )
