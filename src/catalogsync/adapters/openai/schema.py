"""Pydantic models for the OpenAI image generation response."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ImageData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    b64_json: str | None = None
    url: str | None = None


class ImagesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[ImageData]
