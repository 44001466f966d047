from __future__ import annotations

import pytest

from catalogsync.config.http_resilience import ResilienceConfig
from catalogsync.config.notion import NOTION_BASE_URL, NotionConfig


@pytest.fixture
def notion_config() -> NotionConfig:
    return NotionConfig(
        token="secret_notion",
        products_database_id="db-products",
        resilience=ResilienceConfig(name="notion-test", base_url=NOTION_BASE_URL),
    )
