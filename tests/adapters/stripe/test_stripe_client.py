from __future__ import annotations

import httpx
import pytest

from catalogsync.adapters.stripe import StripeAPIError, StripeClient
from catalogsync.config.http_resilience import ResilienceConfig
from catalogsync.config.stripe import STRIPE_BASE_URL, StripeConfig
from catalogsync.domain.model import PriceSpec, ProductSpec, TaxBehavior
from tests.support.http import form_fields, make_client_factory


def _config() -> StripeConfig:
    return StripeConfig(
        secret_key="sk_test_123",
        resilience=ResilienceConfig(name="stripe-test", base_url=STRIPE_BASE_URL),
    )


def _product(product_id: str, name: str, **extra: object) -> dict[str, object]:
    return {"id": product_id, "object": "product", "name": name, "active": True, **extra}


def test_list_products_follows_pagination() -> None:
    seen: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer sk_test_123"
        params = dict(request.url.params)
        seen.append(params)
        if "starting_after" not in params:
            return httpx.Response(
                200,
                json={"data": [_product("prod_1", "One")], "has_more": True},
            )
        return httpx.Response(200, json={"data": [_product("prod_2", "Two")], "has_more": False})

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    products = client.list_products()

    assert [product.id for product in products] == ["prod_1", "prod_2"]
    assert seen[1]["starting_after"] == "prod_1"
    assert seen[0]["limit"] == "100"


def test_list_prices_normalizes_tax_behavior_and_interval() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["product"] == "prod_1"
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "id": "price_1",
                        "object": "price",
                        "product": "prod_1",
                        "unit_amount": 4400,
                        "currency": "USD",
                        "tax_behavior": "unspecified",
                    },
                    {
                        "id": "price_2",
                        "object": "price",
                        "product": {"id": "prod_1"},
                        "unit_amount": 900,
                        "currency": "usd",
                        "recurring": {"interval": "month"},
                        "tax_behavior": "exclusive",
                    },
                ],
                "has_more": False,
            },
        )

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    first, second = client.list_prices(product_id="prod_1")

    assert first.currency == "usd"
    assert first.tax_behavior is None
    assert first.interval is None
    assert second.product_id == "prod_1"
    assert second.interval == "month"
    assert second.tax_behavior is TaxBehavior.EXCLUSIVE


def test_retrieve_missing_product_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404,
            json={"error": {"type": "invalid_request_error", "code": "resource_missing"}},
        )

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    assert client.retrieve_product("prod_gone") is None


def test_create_product_sends_form_encoded_fields() -> None:
    captured: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/v1/products"
        captured.append(form_fields(request))
        return httpx.Response(200, json=_product("prod_new", "Starter Reading"))

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    product = client.create_product(
        ProductSpec(
            name="Starter Reading",
            description="Intro",
            statement_descriptor="MESSY MAGNETIC",
            metadata={"sku": "SR-1"},
        )
    )

    assert product.id == "prod_new"
    assert captured == [
        {
            "name": "Starter Reading",
            "active": "true",
            "description": "Intro",
            "statement_descriptor": "MESSY MAGNETIC",
            "metadata[sku]": "SR-1",
        }
    ]


def test_update_product_clears_removed_metadata_keys() -> None:
    posted: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(
                200,
                json=_product("prod_1", "Kit", metadata={"old": "x", "sku": "A"}),
            )
        posted.append(form_fields(request))
        return httpx.Response(200, json=_product("prod_1", "Kit", metadata={"sku": "B"}))

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    client.update_product("prod_1", ProductSpec(name="Kit", metadata={"sku": "B"}))

    assert posted[0]["metadata[sku]"] == "B"
    assert posted[0]["metadata[old]"] == ""
    assert posted[0]["description"] == ""


def test_update_product_unsets_a_cleared_statement_descriptor() -> None:
    posted: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(
                200,
                json=_product("prod_1", "Kit", statement_descriptor="MESSY MAGNETIC"),
            )
        posted.append(form_fields(request))
        return httpx.Response(200, json=_product("prod_1", "Kit", statement_descriptor=None))

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    product = client.update_product("prod_1", ProductSpec(name="Kit"))

    assert posted[0]["statement_descriptor"] == ""
    assert product.statement_descriptor is None


def test_create_price_encodes_recurring_and_tax_behavior() -> None:
    captured: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(form_fields(request))
        return httpx.Response(
            200,
            json={
                "id": "price_9",
                "product": "prod_1",
                "unit_amount": 1500,
                "currency": "usd",
                "recurring": {"interval": "month"},
                "tax_behavior": "inclusive",
            },
        )

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    price = client.create_price(
        "prod_1",
        PriceSpec(
            unit_amount=1500,
            currency="usd",
            interval="month",
            tax_behavior=TaxBehavior.INCLUSIVE,
        ),
    )

    assert price.id == "price_9"
    assert captured[0] == {
        "product": "prod_1",
        "unit_amount": "1500",
        "currency": "usd",
        "recurring[interval]": "month",
        "tax_behavior": "inclusive",
    }


def test_upload_image_creates_file_link() -> None:
    hosts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(f"{request.url.host}{request.url.path}")
        if request.url.path == "/v1/files":
            assert b"product_image" in request.content
            return httpx.Response(200, json={"id": "file_1", "purpose": "product_image"})
        assert form_fields(request) == {"file": "file_1"}
        return httpx.Response(
            200,
            json={"id": "link_1", "file": "file_1", "url": "https://files.stripe.com/links/x"},
        )

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    url = client.upload_image(b"\x89PNG", filename="kit.png")

    assert url == "https://files.stripe.com/links/x"
    assert hosts == ["files.stripe.com/v1/files", "api.stripe.com/v1/file_links"]


def test_download_image_does_not_send_secret_key() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "Authorization" not in request.headers
        assert request.url.host == "cdn.example"
        return httpx.Response(200, content=b"image-bytes")

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    assert client.download_image("https://cdn.example/a.png") == b"image-bytes"


def test_api_error_carries_status_and_code() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={
                "error": {
                    "type": "invalid_request_error",
                    "code": "parameter_invalid_integer",
                    "message": "Invalid integer: abc",
                }
            },
        )

    client = StripeClient(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(StripeAPIError) as exc:
        client.create_price("prod_1", PriceSpec(unit_amount=1, currency="usd"))

    assert exc.value.status_code == 400
    assert exc.value.code == "parameter_invalid_integer"
    assert "Invalid integer" in str(exc.value)
