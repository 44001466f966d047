"""Google Drive folder image source."""

from __future__ import annotations

import asyncio
import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.domain.normalize import name_key

from .schema import DriveFile, FileList

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from catalogsync.config.http_resilience import ResilienceConfig
    from catalogsync.config.images import DriveConfig

log = getLogger(__name__)

FOLDER_MIME_TYPE: Final = "application/vnd.google-apps.folder"
_FOLDER_ID_PATTERN: Final = re.compile(r"[-\w]{25,}")


class DriveAPIError(RuntimeError):
    """Raised when Google Drive rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def extract_folder_id(reference: str) -> str | None:
    """Return the Drive id embedded in ``reference`` (a bare id or a folder URL)."""

    match = _FOLDER_ID_PATTERN.search(reference)
    return match.group(0) if match else None


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveImageSource:
    """Finds product image folders under a root folder and downloads their first image."""

    def __init__(
        self,
        *,
        config: DriveConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def resolve_folder(self, reference: str) -> str | None:
        folder_id = extract_folder_id(reference)
        if folder_id is not None:
            return folder_id
        if self._config.root_folder_id is None:
            log.info("No Drive root folder configured; cannot search for %r", reference)
            return None
        return asyncio.run(self._search_folder_async(reference.strip()))

    def first_image(self, folder_id: str) -> bytes | None:
        return asyncio.run(self._first_image_async(folder_id))

    async def _search_folder_async(self, name: str) -> str | None:
        query = (
            f"name contains '{_quote(name)}' and '{self._config.root_folder_id}' in parents "
            f"and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        )
        async with self._client_factory(self._resilience) as client:
            folders = await self._list_files(client, query=query, page_size=10)
        if not folders:
            return None
        wanted = name_key(name)
        exact = next((folder for folder in folders if name_key(folder.name) == wanted), None)
        chosen = exact or folders[0]
        log.debug("Resolved image folder %r to %s (%s)", name, chosen.id, chosen.name)
        return chosen.id

    async def _first_image_async(self, folder_id: str) -> bytes | None:
        query = f"'{_quote(folder_id)}' in parents and trashed=false and mimeType contains 'image/'"
        async with self._client_factory(self._resilience) as client:
            images = await self._list_files(client, query=query, page_size=10, order_by="name")
            if not images:
                log.info("Drive folder %s holds no images", folder_id)
                return None
            first = images[0]
            response = await client.get(
                f"files/{first.id}",
                params={"alt": "media"},
                headers=self._headers(),
            )
            _raise_for_error(response)
            log.debug("Downloaded Drive image %s (%s)", first.id, first.name)
            return response.content

    async def _list_files(
        self,
        client: ResilientClient,
        *,
        query: str,
        page_size: int,
        order_by: str | None = None,
    ) -> list[DriveFile]:
        params: dict[str, str | int] = {
            "q": query,
            "pageSize": page_size,
            "fields": "files(id,name,mimeType)",
        }
        if order_by is not None:
            params["orderBy"] = order_by
        response = await client.get("files", params=params, headers=self._headers())
        _raise_for_error(response)
        try:
            return FileList.model_validate(response.json()).files
        except (ValueError, ValidationError) as exc:
            raise DriveAPIError("Unexpected Drive file listing payload") from exc

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.access_token}"}


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_error:
        raise DriveAPIError(
            f"Drive request failed with HTTP {response.status_code}",
            status_code=response.status_code,
        )
