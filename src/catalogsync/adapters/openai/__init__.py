"""OpenAI adapter for generated product images."""

from __future__ import annotations

from .client import ImageGenerationError, OpenAIImageGenerator

__all__ = ["ImageGenerationError", "OpenAIImageGenerator"]
