"""Stripe adapter: the commerce platform holding live products and prices."""

from __future__ import annotations

from .client import StripeAPIError, StripeClient
from .translator import encode_form, parse_price, parse_product, price_params, product_params

__all__ = [
    "StripeAPIError",
    "StripeClient",
    "encode_form",
    "parse_price",
    "parse_product",
    "price_params",
    "product_params",
]
