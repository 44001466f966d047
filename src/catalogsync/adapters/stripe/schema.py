"""Pydantic models describing the Stripe API payloads we consume."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StripeBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ProductPayload(StripeBaseModel):
    id: str
    object: Literal["product"] = "product"
    name: str
    description: str | None = None
    active: bool = True
    statement_descriptor: str | None = None
    tax_code: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict[str, str])
    images: list[str] = Field(default_factory=list[str])
    default_price: str | None = None

    @field_validator("tax_code", "default_price", mode="before")
    @classmethod
    def _expandable_id(cls, value: object) -> object:
        # expandable fields arrive either as an id or as the expanded object
        if isinstance(value, dict):
            return value.get("id")
        return value


class RecurringPayload(StripeBaseModel):
    interval: str
    interval_count: int = 1


class PricePayload(StripeBaseModel):
    id: str
    object: Literal["price"] = "price"
    product: str
    unit_amount: int | None = None
    currency: str
    recurring: RecurringPayload | None = None
    tax_behavior: str | None = None
    active: bool = True

    @field_validator("product", mode="before")
    @classmethod
    def _expandable_product(cls, value: object) -> object:
        if isinstance(value, dict):
            return value.get("id")
        return value


class ProductList(StripeBaseModel):
    data: list[ProductPayload]
    has_more: bool = False


class PriceList(StripeBaseModel):
    data: list[PricePayload]
    has_more: bool = False


class FilePayload(StripeBaseModel):
    id: str
    purpose: str | None = None
    url: str | None = None


class FileLinkPayload(StripeBaseModel):
    id: str
    url: str
    file: str

    @field_validator("file", mode="before")
    @classmethod
    def _expandable_file(cls, value: object) -> object:
        if isinstance(value, dict):
            return value.get("id")
        return value


class ErrorDetail(StripeBaseModel):
    type: str | None = None
    code: str | None = None
    message: str | None = None
    param: str | None = None


class ErrorResponse(StripeBaseModel):
    error: ErrorDetail
