"""Fallback chain that finds or generates a product image.

Stages run in order and each one swallows its own failures:

1. a staff-provided storage folder named on the ledger row
2. the first image already attached to the platform product
3. a generated image from the brand style prompt and the product name

``resolve`` returns ``None`` when every stage comes up empty; the caller simply
retries on the next reconciliation run.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogsync.domain.ports import CommercePlatform, FolderImageSource, ImageGenerator

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class ImageResolver:
    platform: CommercePlatform | None = None
    folders: FolderImageSource | None = None
    generator: ImageGenerator | None = None
    style_prompt: str = ""

    def resolve(
        self,
        name: str,
        image_folder: str | None = None,
        platform_product_id: str | None = None,
    ) -> bytes | None:
        if image_folder:
            image = self._from_folder(image_folder)
            if image is not None:
                return image
        if platform_product_id:
            image = self._from_platform(platform_product_id)
            if image is not None:
                return image
        return self._generate(name)

    def _from_folder(self, reference: str) -> bytes | None:
        if self.folders is None:
            log.debug("No folder image source configured; skipping folder %r", reference)
            return None
        try:
            folder_id = self.folders.resolve_folder(reference)
            if folder_id is None:
                log.info("Image folder %r not found", reference)
                return None
            return self.folders.first_image(folder_id)
        except Exception as exc:  # noqa: BLE001
            log.warning("Folder image lookup failed for %r: %s", reference, exc)
            return None

    def _from_platform(self, product_id: str) -> bytes | None:
        if self.platform is None:
            return None
        try:
            product = self.platform.retrieve_product(product_id)
            if product is None or not product.images:
                return None
            return self.platform.download_image(product.images[0])
        except Exception as exc:  # noqa: BLE001
            log.warning("Existing image download failed for product %s: %s", product_id, exc)
            return None

    def _generate(self, name: str) -> bytes | None:
        if self.generator is None:
            return None
        prompt = f"{self.style_prompt} {name}".strip()
        try:
            return self.generator.generate(prompt)
        except Exception as exc:  # noqa: BLE001
            log.warning("Image generation failed for %r: %s", name, exc)
            return None
