"""In-memory fakes of the catalog ports for reconciliation tests."""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from dataclasses import replace
from typing import TYPE_CHECKING

from catalogsync.domain.errors import ReconciliationLockedError
from catalogsync.domain.model import (
    ActualPrice,
    ActualProduct,
    DesiredProduct,
    ProductType,
    RunRecord,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from catalogsync.domain.model import PriceSpec, ProductSpec


def make_desired(name: str = "Starter Reading", **overrides: object) -> DesiredProduct:
    """Create a ledger row with sensible defaults."""

    values: dict[str, object] = {
        "id": f"row-{name.lower().replace(' ', '-')}",
        "name": name,
        "description": f"{name} description",
        "type": ProductType.ONE_TIME,
        "unit_amount": 4400,
        "currency": "usd",
        "active": True,
        "statement_descriptor": "MESSY MAGNETIC",
    }
    values.update(overrides)
    return DesiredProduct(**values)  # type: ignore[arg-type]


class FakeLedger:
    def __init__(self, rows: list[DesiredProduct] | None = None) -> None:
        self.rows = list(rows or [])
        self.writes: list[tuple[str, str, str | None]] = []

    def read_desired_products(self) -> list[DesiredProduct]:
        return list(self.rows)

    def write_platform_ids(
        self,
        row_id: str,
        *,
        product_id: str,
        price_id: str | None,
    ) -> None:
        self.writes.append((row_id, product_id, price_id))
        self.rows = [
            replace(row, platform_product_id=product_id, platform_price_id=price_id)
            if row.id == row_id
            else row
            for row in self.rows
        ]


class FakePlatform:
    """Dict-backed platform recording every mutating call."""

    def __init__(
        self,
        products: list[ActualProduct] | None = None,
        prices: list[ActualPrice] | None = None,
        *,
        image_bytes: dict[str, bytes] | None = None,
    ) -> None:
        self.products: dict[str, ActualProduct] = {p.id: p for p in products or []}
        self.prices: dict[str, ActualPrice] = {p.id: p for p in prices or []}
        self.image_bytes = dict(image_bytes or {})
        self.calls: list[tuple[str, str]] = []
        self.failing_names: set[str] = set()
        self._ids = itertools.count(1)

    @property
    def writes(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] not in {"download_image"}]

    def list_products(self) -> list[ActualProduct]:
        return list(self.products.values())

    def list_prices(self, *, product_id: str | None = None) -> list[ActualPrice]:
        return [
            price
            for price in self.prices.values()
            if product_id is None or price.product_id == product_id
        ]

    def retrieve_product(self, product_id: str) -> ActualProduct | None:
        return self.products.get(product_id)

    def create_product(self, spec: ProductSpec) -> ActualProduct:
        if spec.name in self.failing_names:
            raise RuntimeError(f"platform rejected {spec.name}")
        product = ActualProduct(
            id=f"prod_{next(self._ids)}",
            name=spec.name,
            description=spec.description or None,
            active=spec.active,
            statement_descriptor=spec.statement_descriptor,
            tax_code=spec.tax_code,
            metadata=dict(spec.metadata),
        )
        self.products[product.id] = product
        self.calls.append(("create_product", product.id))
        return product

    def update_product(self, product_id: str, spec: ProductSpec) -> ActualProduct:
        if spec.name in self.failing_names:
            raise RuntimeError(f"platform rejected {spec.name}")
        product = replace(
            self.products[product_id],
            name=spec.name,
            description=spec.description or None,
            active=spec.active,
            statement_descriptor=spec.statement_descriptor,
            tax_code=spec.tax_code or self.products[product_id].tax_code,
            metadata=dict(spec.metadata),
        )
        self.products[product_id] = product
        self.calls.append(("update_product", product_id))
        return product

    def create_price(self, product_id: str, spec: PriceSpec) -> ActualPrice:
        price = ActualPrice(
            id=f"price_{next(self._ids)}",
            product_id=product_id,
            unit_amount=spec.unit_amount,
            currency=spec.currency,
            interval=spec.interval,
            tax_behavior=spec.tax_behavior,
        )
        self.prices[price.id] = price
        self.calls.append(("create_price", price.id))
        return price

    def set_default_price(self, product_id: str, price_id: str) -> ActualProduct:
        product = replace(self.products[product_id], default_price_id=price_id)
        self.products[product_id] = product
        self.calls.append(("set_default_price", product_id))
        return product

    def set_images(self, product_id: str, image_urls: list[str]) -> ActualProduct:
        product = replace(self.products[product_id], images=tuple(image_urls))
        self.products[product_id] = product
        self.calls.append(("set_images", product_id))
        return product

    def upload_image(self, data: bytes, *, filename: str) -> str:
        url = f"https://files.example/{next(self._ids)}/{filename}"
        self.image_bytes[url] = data
        self.calls.append(("upload_image", url))
        return url

    def download_image(self, url: str) -> bytes:
        self.calls.append(("download_image", url))
        return self.image_bytes[url]


class FakeFolders:
    def __init__(self, images: dict[str, bytes] | None = None) -> None:
        self.images = dict(images or {})
        self.requests: list[str] = []

    def resolve_folder(self, reference: str) -> str | None:
        self.requests.append(reference)
        return reference if reference in self.images else None

    def first_image(self, folder_id: str) -> bytes | None:
        return self.images.get(folder_id)


class FakeGenerator:
    def __init__(self, image: bytes = b"generated", *, fail: bool = False) -> None:
        self.image = image
        self.fail = fail
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> bytes:
        self.prompts.append(prompt)
        if self.fail:
            raise RuntimeError("generation unavailable")
        return self.image


class InMemoryRunLog:
    def __init__(self) -> None:
        self.records: list[RunRecord] = []

    def append(self, record: RunRecord) -> None:
        self.records.append(record)

    def recent(self, *, limit: int = 20) -> list[RunRecord]:
        return sorted(self.records, key=lambda r: r.started_at, reverse=True)[:limit]


class InMemoryRunLock:
    def __init__(self) -> None:
        self.held: set[str] = set()
        self.acquired: list[str] = []
        self.renewals: list[str] = []

    @contextmanager
    def hold(self, name: str) -> Iterator[None]:
        if name in self.held:
            raise ReconciliationLockedError(name)
        self.held.add(name)
        self.acquired.append(name)
        try:
            yield
        finally:
            self.held.discard(name)

    def renew(self, name: str) -> None:
        if name not in self.held:
            raise ReconciliationLockedError(name)
        self.renewals.append(name)
