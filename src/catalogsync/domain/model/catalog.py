"""Desired (ledger) and actual (platform) catalog records."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import ProductType, TaxBehavior


@dataclass(frozen=True, slots=True, kw_only=True)
class DesiredProduct:
    """One ledger row describing how a product should look on the platform.

    ``unit_amount`` is always in minor currency units and ``statement_descriptor``
    is already sanitized; the ledger reader normalizes both before construction.
    """

    id: str
    name: str
    description: str = ""
    type: ProductType = ProductType.ONE_TIME
    unit_amount: int = 0
    currency: str = "usd"
    interval: str | None = None
    active: bool = False
    statement_descriptor: str = ""
    tax_behavior: TaxBehavior = TaxBehavior.UNSPECIFIED
    tax_code: str | None = None
    metadata: dict[str, str] = field(default_factory=dict[str, str])
    image_folder: str | None = None
    platform_product_id: str | None = None
    platform_price_id: str | None = None

    @property
    def effective_interval(self) -> str | None:
        """Billing interval, only when the product is recurring."""

        if self.type is ProductType.RECURRING:
            return self.interval
        return None

    @property
    def price_tax_behavior(self) -> TaxBehavior | None:
        if self.tax_behavior is TaxBehavior.UNSPECIFIED:
            return None
        return self.tax_behavior


@dataclass(frozen=True, slots=True, kw_only=True)
class ActualProduct:
    id: str
    name: str
    description: str | None = None
    active: bool = True
    statement_descriptor: str | None = None
    tax_code: str | None = None
    metadata: dict[str, str] = field(default_factory=dict[str, str])
    images: tuple[str, ...] = ()
    default_price_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ActualPrice:
    """Platform price. Never mutated by reconciliation; superseded by new prices."""

    id: str
    product_id: str
    unit_amount: int | None
    currency: str
    interval: str | None = None
    tax_behavior: TaxBehavior | None = None
    active: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class ProductSpec:
    """Fields written to a platform product by ``ensure_product``."""

    name: str
    id: str | None = None
    description: str = ""
    active: bool = True
    statement_descriptor: str | None = None
    tax_code: str | None = None
    metadata: dict[str, str] = field(default_factory=dict[str, str])

    @classmethod
    def from_desired(
        cls,
        desired: DesiredProduct,
        *,
        product_id: str | None = None,
    ) -> ProductSpec:
        return cls(
            id=product_id or desired.platform_product_id,
            name=desired.name,
            description=desired.description,
            active=desired.active,
            statement_descriptor=desired.statement_descriptor or None,
            tax_code=desired.tax_code,
            metadata=dict(desired.metadata),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class PriceSpec:
    """Identity tuple of a price: two prices are interchangeable iff their specs match."""

    unit_amount: int
    currency: str
    interval: str | None = None
    tax_behavior: TaxBehavior | None = None

    @classmethod
    def from_desired(cls, desired: DesiredProduct) -> PriceSpec:
        return cls(
            unit_amount=desired.unit_amount,
            currency=desired.currency,
            interval=desired.effective_interval,
            tax_behavior=desired.price_tax_behavior,
        )

    def matches(self, price: ActualPrice) -> bool:
        return (
            price.unit_amount == self.unit_amount
            and price.currency == self.currency
            and price.interval == self.interval
            and price.tax_behavior == self.tax_behavior
        )
