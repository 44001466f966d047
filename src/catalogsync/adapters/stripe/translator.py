"""Translate Stripe payloads to domain records and domain specs to form params."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from catalogsync.domain.model import ActualPrice, ActualProduct, TaxBehavior

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from catalogsync.domain.model import PriceSpec, ProductSpec

    from .schema import PricePayload, ProductPayload

FormParams = dict[str, object]


def parse_product(payload: ProductPayload) -> ActualProduct:
    return ActualProduct(
        id=payload.id,
        name=payload.name,
        description=payload.description,
        active=payload.active,
        statement_descriptor=payload.statement_descriptor,
        tax_code=payload.tax_code,
        metadata=dict(payload.metadata),
        images=tuple(payload.images),
        default_price_id=payload.default_price,
    )


def parse_price(payload: PricePayload) -> ActualPrice:
    return ActualPrice(
        id=payload.id,
        product_id=payload.product,
        unit_amount=payload.unit_amount,
        currency=payload.currency.lower(),
        interval=payload.recurring.interval if payload.recurring else None,
        tax_behavior=_parse_tax_behavior(payload.tax_behavior),
        active=payload.active,
    )


def _parse_tax_behavior(value: str | None) -> TaxBehavior | None:
    # Stripe reports "unspecified" for prices created without a tax behavior.
    if value is None or value == TaxBehavior.UNSPECIFIED:
        return None
    return TaxBehavior(value)


def product_params(
    spec: ProductSpec,
    *,
    current_metadata: Mapping[str, str] | None = None,
) -> FormParams:
    """Form params for product create/update.

    On update, a blank descriptor and metadata keys that exist on the platform but not
    in ``spec`` are sent as empty strings, which Stripe treats as deletion.
    """

    params: FormParams = {
        "name": spec.name,
        "active": spec.active,
    }
    if spec.description or current_metadata is not None:
        params["description"] = spec.description
    if spec.statement_descriptor or current_metadata is not None:
        params["statement_descriptor"] = spec.statement_descriptor or ""
    if spec.tax_code:
        params["tax_code"] = spec.tax_code
    metadata: dict[str, str] = dict(spec.metadata)
    if current_metadata is not None:
        for key in current_metadata:
            metadata.setdefault(key, "")
    if metadata:
        params["metadata"] = metadata
    return params


def price_params(product_id: str, spec: PriceSpec) -> FormParams:
    params: FormParams = {
        "product": product_id,
        "unit_amount": spec.unit_amount,
        "currency": spec.currency,
    }
    if spec.interval:
        params["recurring"] = {"interval": spec.interval}
    if spec.tax_behavior is not None:
        params["tax_behavior"] = spec.tax_behavior.value
    return params


def encode_form(params: Mapping[str, object], prefix: str | None = None) -> list[tuple[str, str]]:
    """Flatten nested params into Stripe's bracketed form encoding.

    ``{"metadata": {"a": "1"}, "images": ["u"]}`` becomes
    ``[("metadata[a]", "1"), ("images[0]", "u")]``. ``None`` values are omitted.
    """

    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else key
        pairs.extend(_encode_value(name, value))
    return pairs


def _encode_value(name: str, value: object) -> list[tuple[str, str]]:
    if value is None:
        return []
    if isinstance(value, bool):
        return [(name, "true" if value else "false")]
    if isinstance(value, dict):
        return encode_form(cast("Mapping[str, object]", value), prefix=name)
    if isinstance(value, list | tuple):
        pairs: list[tuple[str, str]] = []
        for index, item in enumerate(cast("Sequence[object]", value)):
            pairs.extend(_encode_value(f"{name}[{index}]", item))
        return pairs
    return [(name, str(value))]
