"""Image generation through the OpenAI Images API."""

from __future__ import annotations

import asyncio
import base64
import binascii
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from catalogsync.adapters.http_resilience import ResilientClient

from .schema import ImagesResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.config.http_resilience import ResilienceConfig
    from catalogsync.config.images import ImageGenerationConfig

log = getLogger(__name__)


class ImageGenerationError(RuntimeError):
    """Raised when the image API fails or returns no image."""


class OpenAIImageGenerator:
    def __init__(
        self,
        *,
        config: ImageGenerationConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or ResilientClient

    def generate(self, prompt: str) -> bytes:
        return asyncio.run(self._generate_async(prompt))

    async def _generate_async(self, prompt: str) -> bytes:
        body = {
            "model": self._config.model,
            "prompt": prompt,
            "n": 1,
            "size": self._config.size,
            "response_format": "b64_json",
        }
        async with self._client_factory(self._config.resilience) as client:
            response = await client.post(
                "images/generations",
                json=body,
                headers={"Authorization": f"Bearer {self._config.api_key}"},
            )
        if response.is_error:
            raise ImageGenerationError(f"Image generation failed with HTTP {response.status_code}")
        try:
            payload = ImagesResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ImageGenerationError("Unexpected image generation payload") from exc
        if not payload.data or payload.data[0].b64_json is None:
            raise ImageGenerationError("Image generation returned no image data")
        try:
            image = base64.b64decode(payload.data[0].b64_json, validate=True)
        except binascii.Error as exc:
            raise ImageGenerationError("Image generation returned invalid base64") from exc
        log.info("Generated image for prompt %r (%s bytes)", prompt, len(image))
        return image
