"""Domain model for the product catalog."""

from __future__ import annotations

from .catalog import ActualPrice, ActualProduct, DesiredProduct, PriceSpec, ProductSpec
from .enums import Action, ProductType, RunMode, TaxBehavior
from .run import RunRecord

__all__ = [
    "Action",
    "ActualPrice",
    "ActualProduct",
    "DesiredProduct",
    "PriceSpec",
    "ProductSpec",
    "ProductType",
    "RunMode",
    "RunRecord",
    "TaxBehavior",
]
