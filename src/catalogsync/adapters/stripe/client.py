"""HTTP client for the Stripe catalog endpoints (products, prices, files)."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ValidationError

from catalogsync.adapters.http_resilience import ResilientClient

from .schema import (
    ErrorResponse,
    FileLinkPayload,
    FilePayload,
    PriceList,
    PricePayload,
    ProductList,
    ProductPayload,
)
from .translator import encode_form, parse_price, parse_product, price_params, product_params

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.config.http_resilience import ResilienceConfig
    from catalogsync.config.stripe import StripeConfig
    from catalogsync.domain.model import ActualPrice, ActualProduct, PriceSpec, ProductSpec

log = getLogger(__name__)

PAGE_SIZE = 100
PRODUCT_IMAGE_PURPOSE = "product_image"


class StripeAPIError(RuntimeError):
    """Raised when Stripe rejects a request or returns an unexpected payload."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class StripeClient:
    """Synchronous facade over Stripe's REST API.

    Every public call opens a resilient async client, performs the request(s) and
    closes it again. List calls follow ``starting_after`` cursors until Stripe reports
    ``has_more=false``.
    """

    def __init__(
        self,
        *,
        config: StripeConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    # -- reads -------------------------------------------------------------------------

    def list_products(self) -> list[ActualProduct]:
        pages = asyncio.run(self._list_all("products", ProductList, params={}))
        return [parse_product(payload) for page in pages for payload in page.data]

    def list_prices(self, *, product_id: str | None = None) -> list[ActualPrice]:
        params = {"product": product_id} if product_id else {}
        pages = asyncio.run(self._list_all("prices", PriceList, params=params))
        return [parse_price(payload) for page in pages for payload in page.data]

    def retrieve_product(self, product_id: str) -> ActualProduct | None:
        payload = asyncio.run(self._retrieve_product_async(product_id))
        return parse_product(payload) if payload is not None else None

    def download_image(self, url: str) -> bytes:
        return asyncio.run(self._download_async(url))

    # -- writes ------------------------------------------------------------------------

    def create_product(self, spec: ProductSpec) -> ActualProduct:
        payload = asyncio.run(self._post("products", product_params(spec), ProductPayload))
        return parse_product(payload)

    def update_product(self, product_id: str, spec: ProductSpec) -> ActualProduct:
        return parse_product(asyncio.run(self._update_product_async(product_id, spec)))

    def create_price(self, product_id: str, spec: PriceSpec) -> ActualPrice:
        payload = asyncio.run(self._post("prices", price_params(product_id, spec), PricePayload))
        return parse_price(payload)

    def set_default_price(self, product_id: str, price_id: str) -> ActualProduct:
        payload = asyncio.run(
            self._post(f"products/{product_id}", {"default_price": price_id}, ProductPayload)
        )
        return parse_product(payload)

    def set_images(self, product_id: str, image_urls: list[str]) -> ActualProduct:
        payload = asyncio.run(
            self._post(f"products/{product_id}", {"images": image_urls}, ProductPayload)
        )
        return parse_product(payload)

    def upload_image(self, data: bytes, *, filename: str) -> str:
        """Upload ``data`` as a product image file and return a public file link URL."""

        return asyncio.run(self._upload_image_async(data, filename=filename))

    # -- async internals ---------------------------------------------------------------

    async def _list_all[TPage: (ProductList, PriceList)](
        self,
        path: str,
        model: type[TPage],
        *,
        params: dict[str, str],
    ) -> list[TPage]:
        pages: list[TPage] = []
        starting_after: str | None = None
        async with self._client_factory(self._resilience) as client:
            while True:
                query: dict[str, str | int] = {**params, "limit": PAGE_SIZE}
                if starting_after is not None:
                    query["starting_after"] = starting_after
                response = await client.get(path, params=query, headers=self._headers())
                page = self._parse(response, model)
                pages.append(page)
                if not page.has_more or not page.data:
                    break
                starting_after = page.data[-1].id
        log.debug("Listed %s pages of Stripe %s", len(pages), path)
        return pages

    async def _retrieve_product_async(self, product_id: str) -> ProductPayload | None:
        async with self._client_factory(self._resilience) as client:
            return await self._get_product(client, product_id)

    async def _get_product(
        self,
        client: ResilientClient,
        product_id: str,
    ) -> ProductPayload | None:
        response = await client.get(f"products/{product_id}", headers=self._headers())
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        return self._parse(response, ProductPayload)

    async def _update_product_async(self, product_id: str, spec: ProductSpec) -> ProductPayload:
        async with self._client_factory(self._resilience) as client:
            current = await self._get_product(client, product_id)
            if current is None:
                raise StripeAPIError(f"Product {product_id} does not exist", status_code=404)
            params = product_params(spec, current_metadata=current.metadata)
            response = await client.post(
                f"products/{product_id}",
                data=dict(encode_form(params)),
                headers=self._headers(),
            )
            return self._parse(response, ProductPayload)

    async def _post[TModel: BaseModel](
        self,
        path: str,
        params: dict[str, object],
        model: type[TModel],
    ) -> TModel:
        async with self._client_factory(self._resilience) as client:
            response = await client.post(
                path,
                data=dict(encode_form(params)),
                headers=self._headers(),
            )
            return self._parse(response, model)

    async def _upload_image_async(self, data: bytes, *, filename: str) -> str:
        files_resilience = replace(
            self._resilience,
            name=f"{self._resilience.name}-files",
            base_url=self._config.files_base_url,
        )
        async with self._client_factory(files_resilience) as client:
            response = await client.post(
                "files",
                data={"purpose": PRODUCT_IMAGE_PURPOSE},
                files={"file": (filename, data, "application/octet-stream")},
                headers=self._headers(),
            )
            uploaded = self._parse(response, FilePayload)

        async with self._client_factory(self._resilience) as client:
            response = await client.post(
                "file_links",
                data={"file": uploaded.id},
                headers=self._headers(),
            )
            link = self._parse(response, FileLinkPayload)
        log.debug("Uploaded Stripe file %s as %s", uploaded.id, link.url)
        return link.url

    async def _download_async(self, url: str) -> bytes:
        # plain fetch: image hosts must never see the Stripe secret key
        download_resilience = replace(
            self._resilience,
            name=f"{self._resilience.name}-download",
            base_url=None,
            default_headers=None,
        )
        async with self._client_factory(download_resilience) as client:
            response = await client.get(url, follow_redirects=True)
            if response.is_error:
                raise StripeAPIError(
                    f"Image download failed with HTTP {response.status_code}",
                    status_code=response.status_code,
                )
            return response.content

    def _headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._config.secret_key}"}
        if self._config.api_version:
            headers["Stripe-Version"] = self._config.api_version
        return headers

    @staticmethod
    def _parse[TModel: BaseModel](response: httpx.Response, model: type[TModel]) -> TModel:
        if response.is_error:
            raise _api_error(response)
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise StripeAPIError(
                f"Unexpected Stripe response payload for {response.request.url.path}",
                status_code=response.status_code,
            ) from exc


def _api_error(response: httpx.Response) -> StripeAPIError:
    try:
        detail = ErrorResponse.model_validate(response.json()).error
    except (ValueError, ValidationError):
        return StripeAPIError(
            f"Stripe request failed with HTTP {response.status_code}",
            status_code=response.status_code,
        )
    message = detail.message or detail.type or "unknown error"
    log.error("Stripe API error %s (%s): %s", response.status_code, detail.code, message)
    return StripeAPIError(message, status_code=response.status_code, code=detail.code)

