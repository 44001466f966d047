"""Diff planning between desired ledger rows and the platform catalog.

``build_plan`` is a pure function of the two snapshots. Each ``PlanItem`` lists the
actions one desired product still needs; items do not depend on each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from catalogsync.domain.model import Action, PriceSpec
from catalogsync.domain.normalize import canonical_metadata, name_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from catalogsync.domain.model import ActualPrice, ActualProduct, DesiredProduct

NEW_PRODUCT_ACTIONS: tuple[Action, ...] = (
    Action.CREATE_PRODUCT,
    Action.CREATE_PRICE,
    Action.ATTACH_IMAGE,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class PlanItem:
    name: str
    desired: DesiredProduct
    actions: tuple[Action, ...] = ()
    matched_platform_id: str | None = None
    current: ActualProduct | None = None

    @property
    def needs_work(self) -> bool:
        return bool(self.actions)

    def requires(self, action: Action) -> bool:
        return action in self.actions


@dataclass(frozen=True, slots=True)
class PlanSummary:
    to_create: int = 0
    to_update: int = 0
    to_price_create: int = 0
    to_image_attach: int = 0

    @property
    def total_actions(self) -> int:
        return self.to_create + self.to_update + self.to_price_create + self.to_image_attach


def build_plan(
    desired: Iterable[DesiredProduct],
    products: Sequence[ActualProduct],
    prices: Sequence[ActualPrice],
) -> list[PlanItem]:
    """Compute the ordered action set for every desired product."""

    by_id = {product.id: product for product in products}
    by_name: dict[str, ActualProduct] = {}
    for product in products:
        by_name.setdefault(name_key(product.name), product)

    prices_by_product: dict[str, list[ActualPrice]] = {}
    for price in prices:
        prices_by_product.setdefault(price.product_id, []).append(price)

    items: list[PlanItem] = []
    for item in desired:
        current = match_product(item, by_id=by_id, by_name=by_name)
        if current is None:
            items.append(PlanItem(name=item.name, desired=item, actions=NEW_PRODUCT_ACTIONS))
            continue

        actions: list[Action] = []
        if product_needs_update(item, current):
            actions.append(Action.UPDATE_PRODUCT)
        spec = PriceSpec.from_desired(item)
        if not any(spec.matches(price) for price in prices_by_product.get(current.id, ())):
            actions.append(Action.CREATE_PRICE)
        if not current.images:
            actions.append(Action.ATTACH_IMAGE)
        items.append(
            PlanItem(
                name=item.name,
                desired=item,
                actions=tuple(actions),
                matched_platform_id=current.id,
                current=current,
            )
        )
    return items


def match_product(
    desired: DesiredProduct,
    *,
    by_id: dict[str, ActualProduct],
    by_name: dict[str, ActualProduct],
) -> ActualProduct | None:
    """Match by platform id when the row carries one, otherwise by name."""

    if desired.platform_product_id:
        return by_id.get(desired.platform_product_id)
    return by_name.get(name_key(desired.name))


def product_needs_update(desired: DesiredProduct, current: ActualProduct) -> bool:
    return bool(product_differences(desired, current))


def product_differences(desired: DesiredProduct, current: ActualProduct) -> list[str]:
    """Names of product fields whose platform value differs from the ledger."""

    differences: list[str] = []
    if current.name != desired.name:
        differences.append("name")
    if (current.description or "") != desired.description:
        differences.append("description")
    if current.active != desired.active:
        differences.append("active")
    if (current.statement_descriptor or "") != desired.statement_descriptor:
        differences.append("statement_descriptor")
    # tax code is only enforced when the ledger sets one
    if desired.tax_code and current.tax_code != desired.tax_code:
        differences.append("tax_code")
    if canonical_metadata(current.metadata) != canonical_metadata(desired.metadata):
        differences.append("metadata")
    return differences


def summarize(items: Iterable[PlanItem]) -> PlanSummary:
    to_create = to_update = to_price_create = to_image_attach = 0
    for item in items:
        to_create += item.requires(Action.CREATE_PRODUCT)
        to_update += item.requires(Action.UPDATE_PRODUCT)
        to_price_create += item.requires(Action.CREATE_PRICE)
        to_image_attach += item.requires(Action.ATTACH_IMAGE)
    return PlanSummary(
        to_create=to_create,
        to_update=to_update,
        to_price_create=to_price_create,
        to_image_attach=to_image_attach,
    )
