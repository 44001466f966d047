"""Translate Notion ledger rows into ``DesiredProduct`` records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from catalogsync.domain.model import DesiredProduct, ProductType, TaxBehavior
from catalogsync.domain.normalize import (
    normalize_unit_amount,
    parse_metadata,
    sanitize_statement_descriptor,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .schema import PagePayload, PropertyValue

log = getLogger(__name__)

# Canonical column name first, then accepted aliases.
NAME_COLUMNS: Final = ("Name",)
DESCRIPTION_COLUMNS: Final = ("Description",)
TYPE_COLUMNS: Final = ("Type",)
PRICE_COLUMNS: Final = ("Price", "Amount")
CURRENCY_COLUMNS: Final = ("Currency",)
INTERVAL_COLUMNS: Final = ("Interval", "Billing Interval")
DESCRIPTOR_COLUMNS: Final = ("Statement Descriptor",)
TAX_BEHAVIOR_COLUMNS: Final = ("Tax Behavior",)
TAX_CODE_COLUMNS: Final = ("Tax Code",)
METADATA_COLUMNS: Final = ("Metadata",)
IMAGE_FOLDER_COLUMNS: Final = ("Image Folder",)
ACTIVE_COLUMNS: Final = ("Active",)
PRODUCT_ID_COLUMNS: Final = ("Stripe Product ID", "Platform Product ID")
PRICE_ID_COLUMNS: Final = ("Stripe Price ID", "Platform Price ID")

DEFAULT_CURRENCY: Final = "usd"

_TYPE_ALIASES: Final = {
    "one-time": ProductType.ONE_TIME,
    "one time": ProductType.ONE_TIME,
    "onetime": ProductType.ONE_TIME,
    "recurring": ProductType.RECURRING,
}


def find_column[TValue](
    properties: Mapping[str, TValue],
    candidates: tuple[str, ...],
) -> str | None:
    """Return the actual key for the first candidate present, ignoring case.

    An exact match on a candidate wins over a case-insensitive one.
    """

    folded = {key.casefold(): key for key in properties}
    for candidate in candidates:
        if candidate in properties:
            return candidate
        key = folded.get(candidate.casefold())
        if key is not None:
            return key
    return None


class RowReader:
    """Case-insensitive, alias-tolerant accessors over one page's properties."""

    def __init__(self, page: PagePayload) -> None:
        self._properties = page.properties

    def _get(self, candidates: tuple[str, ...]) -> PropertyValue | None:
        key = find_column(self._properties, candidates)
        return self._properties[key] if key is not None else None

    def text(self, candidates: tuple[str, ...]) -> str:
        prop = self._get(candidates)
        if prop is None:
            return ""
        match prop.type:
            case "title":
                return "".join(part.plain_text for part in prop.title or ()).strip()
            case "rich_text":
                return "".join(part.plain_text for part in prop.rich_text or ()).strip()
            case "select":
                return prop.select.name.strip() if prop.select else ""
            case "status":
                return prop.status.name.strip() if prop.status else ""
            case "multi_select":
                return ",".join(option.name for option in prop.multi_select or ())
            case "url":
                return (prop.url or "").strip()
            case "number":
                return "" if prop.number is None else f"{prop.number:g}"
            case _:
                return ""

    def number(self, candidates: tuple[str, ...]) -> float | None:
        for candidate in candidates:
            prop = self._get((candidate,))
            if prop is not None and prop.number is not None:
                return prop.number
        return None

    def checkbox(self, candidates: tuple[str, ...]) -> bool:
        prop = self._get(candidates)
        return bool(prop is not None and prop.checkbox)


def parse_desired_product(
    page: PagePayload,
    *,
    default_statement_descriptor: str = "",
) -> DesiredProduct | None:
    """Build a ``DesiredProduct`` from one row, or ``None`` when it has no name."""

    row = RowReader(page)
    name = row.text(NAME_COLUMNS)
    if not name:
        return None

    interval = row.text(INTERVAL_COLUMNS).lower() or None
    descriptor = row.text(DESCRIPTOR_COLUMNS) or default_statement_descriptor
    return DesiredProduct(
        id=page.id,
        name=name,
        description=row.text(DESCRIPTION_COLUMNS),
        type=_parse_type(row.text(TYPE_COLUMNS), page_id=page.id),
        unit_amount=normalize_unit_amount(row.number(PRICE_COLUMNS)),
        currency=(row.text(CURRENCY_COLUMNS) or DEFAULT_CURRENCY).lower(),
        interval=interval,
        active=row.checkbox(ACTIVE_COLUMNS),
        statement_descriptor=sanitize_statement_descriptor(descriptor),
        tax_behavior=_parse_tax_behavior(row.text(TAX_BEHAVIOR_COLUMNS), page_id=page.id),
        tax_code=row.text(TAX_CODE_COLUMNS) or None,
        metadata=parse_metadata(row.text(METADATA_COLUMNS)),
        image_folder=row.text(IMAGE_FOLDER_COLUMNS) or None,
        platform_product_id=row.text(PRODUCT_ID_COLUMNS) or None,
        platform_price_id=row.text(PRICE_ID_COLUMNS) or None,
    )


def _parse_type(value: str, *, page_id: str) -> ProductType:
    if not value:
        return ProductType.ONE_TIME
    parsed = _TYPE_ALIASES.get(value.strip().lower())
    if parsed is None:
        log.warning("Row %s has unknown product type %r; assuming one-time", page_id, value)
        return ProductType.ONE_TIME
    return parsed


def _parse_tax_behavior(value: str, *, page_id: str) -> TaxBehavior:
    if not value:
        return TaxBehavior.UNSPECIFIED
    try:
        return TaxBehavior(value.strip().lower())
    except ValueError:
        log.warning("Row %s has unknown tax behavior %r; using unspecified", page_id, value)
        return TaxBehavior.UNSPECIFIED


def rich_text_value(content: str) -> dict[str, object]:
    """Notion property value writing ``content`` into a rich text column."""

    return {"rich_text": [{"type": "text", "text": {"content": content}}]}
