"""Ports for image sources used by the image resolver."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class FolderImageSource(Protocol):
    """Storage folders holding staff-provided product images."""

    def resolve_folder(self, reference: str) -> str | None:
        """Return a folder id for an id-like string or a folder name."""
        ...

    def first_image(self, folder_id: str) -> bytes | None: ...


@runtime_checkable
class ImageGenerator(Protocol):
    def generate(self, prompt: str) -> bytes: ...


__all__ = ["FolderImageSource", "ImageGenerator"]
