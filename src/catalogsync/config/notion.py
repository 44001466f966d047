"""Notion ledger configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

NOTION_BASE_URL = "https://api.notion.com/v1/"
NOTION_API_VERSION = "2022-06-28"


@dataclass(frozen=True, slots=True)
class NotionConfig:
    """Holds Notion API configuration and the product ledger database id."""

    token: str
    products_database_id: str
    resilience: ResilienceConfig
    api_version: str = NOTION_API_VERSION


def get_notion_config(*, resilience: ResilienceConfig | None = None) -> NotionConfig:
    values = require_env_vars(("NOTION_TOKEN", "NOTION_PRODUCTS_DB_ID"))
    return NotionConfig(
        token=values["NOTION_TOKEN"],
        products_database_id=values["NOTION_PRODUCTS_DB_ID"],
        api_version=optional_env_var("NOTION_API_VERSION") or NOTION_API_VERSION,
        resilience=resilience
        or ResilienceConfig(
            name="notion",
            base_url=NOTION_BASE_URL,
            # Notion documents an average of three requests per second per integration.
            ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
            # database queries are POST requests but read-only
            retry=RetryPolicy(allowed_methods=frozenset({"GET", "PATCH", "POST"})),
        ),
    )
