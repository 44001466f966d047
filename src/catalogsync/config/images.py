"""Configuration for the optional image sources (Google Drive, OpenAI)."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DRIVE_BASE_URL = "https://www.googleapis.com/drive/v3/"
OPENAI_BASE_URL = "https://api.openai.com/v1/"
DEFAULT_IMAGE_MODEL = "dall-e-3"
DEFAULT_IMAGE_SIZE = "1024x1024"


@dataclass(frozen=True, slots=True)
class DriveConfig:
    access_token: str
    root_folder_id: str | None
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class ImageGenerationConfig:
    api_key: str
    style_prompt: str
    resilience: ResilienceConfig
    model: str = DEFAULT_IMAGE_MODEL
    size: str = DEFAULT_IMAGE_SIZE


def get_drive_config() -> DriveConfig | None:
    """Return Drive settings, or ``None`` when no access token is configured."""

    token = optional_env_var("GOOGLE_DRIVE_ACCESS_TOKEN")
    if token is None:
        return None
    return DriveConfig(
        access_token=token,
        root_folder_id=optional_env_var("DRIVE_PRODUCT_IMAGES_ROOT_ID"),
        resilience=ResilienceConfig(
            name="drive",
            base_url=DRIVE_BASE_URL,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            # File media is addressed by id and does not change underneath us.
            cache=CacheConfig(backend="sqlite"),
        ),
    )


def get_image_generation_config() -> ImageGenerationConfig | None:
    """Return image generation settings, or ``None`` without an API key."""

    api_key = optional_env_var("OPENAI_API_KEY")
    if api_key is None:
        return None
    return ImageGenerationConfig(
        api_key=api_key,
        style_prompt=optional_env_var("IMAGE_STYLE_PROMPT") or "",
        model=optional_env_var("OPENAI_IMAGE_MODEL") or DEFAULT_IMAGE_MODEL,
        resilience=ResilienceConfig(
            name="openai-images",
            base_url=OPENAI_BASE_URL,
            timeout_seconds=120.0,
            retry=RetryPolicy(total=2),
        ),
    )
