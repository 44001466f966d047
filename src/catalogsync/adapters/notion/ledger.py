"""Notion-backed product ledger: the desired-state reader and id write-back."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .translator import (
    PRICE_ID_COLUMNS,
    PRODUCT_ID_COLUMNS,
    find_column,
    parse_desired_product,
    rich_text_value,
)

if TYPE_CHECKING:
    from catalogsync.domain.model import DesiredProduct

    from .client import NotionClient

log = getLogger(__name__)


@dataclass(slots=True)
class NotionLedger:
    client: NotionClient
    database_id: str
    default_statement_descriptor: str = ""
    _link_columns: tuple[str, str] | None = field(default=None, init=False, repr=False)

    def read_desired_products(self) -> list[DesiredProduct]:
        products: list[DesiredProduct] = []
        skipped = 0
        for page in self.client.query_database(self.database_id):
            product = parse_desired_product(
                page,
                default_statement_descriptor=self.default_statement_descriptor,
            )
            if product is None:
                skipped += 1
                continue
            products.append(product)
        log.info(
            "Read %s desired products from ledger (%s unnamed rows skipped)",
            len(products),
            skipped,
        )
        return products

    def write_platform_ids(
        self,
        row_id: str,
        *,
        product_id: str,
        price_id: str | None,
    ) -> None:
        product_column, price_column = self.ensure_link_columns()
        properties = {product_column: rich_text_value(product_id)}
        if price_id is not None:
            properties[price_column] = rich_text_value(price_id)
        self.client.update_page_properties(row_id, properties)
        log.info("Recorded platform ids on ledger row %s: %s / %s", row_id, product_id, price_id)

    def ensure_link_columns(self) -> tuple[str, str]:
        """Return the product/price id column names, creating missing ones."""

        if self._link_columns is not None:
            return self._link_columns
        database = self.client.retrieve_database(self.database_id)
        product_column = find_column(database.properties, PRODUCT_ID_COLUMNS)
        price_column = find_column(database.properties, PRICE_ID_COLUMNS)
        missing: dict[str, dict[str, object]] = {}
        if product_column is None:
            product_column = PRODUCT_ID_COLUMNS[0]
            missing[product_column] = {"rich_text": {}}
        if price_column is None:
            price_column = PRICE_ID_COLUMNS[0]
            missing[price_column] = {"rich_text": {}}
        if missing:
            log.info("Adding ledger columns: %s", ", ".join(sorted(missing)))
            self.client.add_database_properties(self.database_id, missing)
        self._link_columns = (product_column, price_column)
        return self._link_columns
