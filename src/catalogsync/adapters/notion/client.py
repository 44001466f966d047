"""HTTP client for the Notion database endpoints used by the product ledger."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from catalogsync.adapters.http_resilience import ResilientClient

from .schema import DatabasePayload, ErrorResponse, PagePayload, QueryResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    import httpx

    from catalogsync.config.http_resilience import ResilienceConfig
    from catalogsync.config.notion import NotionConfig

log = getLogger(__name__)

PAGE_SIZE = 100


class NotionAPIError(RuntimeError):
    """Raised when Notion rejects a request or returns an unexpected payload."""

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


class NotionClient:
    """Low-level synchronous client for Notion databases and pages."""

    def __init__(
        self,
        *,
        config: NotionConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def query_database(self, database_id: str) -> list[PagePayload]:
        """Return every row of the database, following ``next_cursor``."""

        return asyncio.run(self._query_database_async(database_id))

    def retrieve_database(self, database_id: str) -> DatabasePayload:
        return asyncio.run(self._request("GET", f"databases/{database_id}", DatabasePayload))

    def add_database_properties(
        self,
        database_id: str,
        properties: Mapping[str, Mapping[str, object]],
    ) -> DatabasePayload:
        return asyncio.run(
            self._request(
                "PATCH",
                f"databases/{database_id}",
                DatabasePayload,
                json={"properties": dict(properties)},
            )
        )

    def update_page_properties(
        self,
        page_id: str,
        properties: Mapping[str, Mapping[str, object]],
    ) -> PagePayload:
        return asyncio.run(
            self._request(
                "PATCH",
                f"pages/{page_id}",
                PagePayload,
                json={"properties": dict(properties)},
            )
        )

    async def _query_database_async(self, database_id: str) -> list[PagePayload]:
        pages: list[PagePayload] = []
        cursor: str | None = None
        async with self._client_factory(self._resilience) as client:
            while True:
                body: dict[str, object] = {"page_size": PAGE_SIZE}
                if cursor is not None:
                    body["start_cursor"] = cursor
                response = await client.post(
                    f"databases/{database_id}/query",
                    json=body,
                    headers=self._headers(),
                )
                result = _parse(response, QueryResponse)
                pages.extend(page for page in result.results if not page.archived)
                if not result.has_more or result.next_cursor is None:
                    break
                cursor = result.next_cursor
        log.debug("Queried %s rows from Notion database %s", len(pages), database_id)
        return pages

    async def _request[TModel: BaseModel](
        self,
        method: str,
        path: str,
        model: type[TModel],
        *,
        json: object | None = None,
    ) -> TModel:
        async with self._client_factory(self._resilience) as client:
            if json is None:
                response = await client.request(method, path, headers=self._headers())
            else:
                response = await client.request(method, path, json=json, headers=self._headers())
            return _parse(response, model)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.token}",
            "Notion-Version": self._config.api_version,
        }


def _parse[TModel: BaseModel](response: httpx.Response, model: type[TModel]) -> TModel:
    if response.is_error:
        try:
            error = ErrorResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            error = ErrorResponse()
        message = error.message or f"Notion request failed with HTTP {response.status_code}"
        log.error("Notion API error %s (%s): %s", response.status_code, error.code, message)
        raise NotionAPIError(message, status_code=response.status_code, code=error.code)
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise NotionAPIError(
            f"Unexpected Notion response payload for {response.request.url.path}",
            status_code=response.status_code,
        ) from exc
