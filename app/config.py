"""Environment-driven settings for the validator service."""

import os
from functools import lru_cache

from pydantic import BaseModel, Field

DEFAULT_SITE_DOMAIN = "example.com"


class Settings(BaseModel):
    site_domain: str = DEFAULT_SITE_DOMAIN
    dev_server_url: str = "http://localhost:3000"
    content_path: str = "content"
    url_pattern: str = "/blog/{slug}"
    html_timeout_ms: int = Field(default=5000, ge=100)


@lru_cache
def get_settings() -> Settings:
    """Build :class:`Settings` from ``SEO_*`` environment variables."""
    values = {
        "site_domain": os.getenv("SEO_SITE_DOMAIN"),
        "dev_server_url": os.getenv("SEO_DEV_SERVER_URL"),
        "content_path": os.getenv("SEO_CONTENT_PATH"),
        "url_pattern": os.getenv("SEO_URL_PATTERN"),
        "html_timeout_ms": os.getenv("SEO_HTML_TIMEOUT_MS"),
    }
    return Settings(**{key: value for key, value in values.items() if value})
