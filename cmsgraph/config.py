"""Service configuration: defaults overridden by environment variables."""

import logging
import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

_ENV_MAPPING = {
    "CMSGRAPH_TOKEN": "token",
    "CMSGRAPH_API_URL": "api_url",
    "CMSGRAPH_PUBLIC_URL_PREFIX": "public_url_prefix",
    "CMSGRAPH_DEFAULT_LANGUAGE": "default_language",
    "CMSGRAPH_VERSION": "version",
    "CMSGRAPH_RESOLVE_LINKS": "resolve_links",
    "CMSGRAPH_LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    token: Optional[str] = None
    api_url: str = "https://api.storyblok.com/v2/cdn"
    public_url_prefix: str = "/"
    default_language: str = "default"
    version: Literal["draft", "published"] = "published"
    resolve_links: Literal["link", "url", "story", "0", "1"] = "story"
    log_level: str = "INFO"
    stories_per_page: int = Field(default=100, ge=1, le=100)


def load_settings() -> Settings:
    """Build :class:`Settings` from defaults and ``CMSGRAPH_*`` environment variables."""
    data = {}
    for env_var, field in _ENV_MAPPING.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[field] = value
    settings = Settings(**data)
    if not settings.token:
        logger.warning("CMSGRAPH_TOKEN is not set; CMS requests will be rejected")
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
