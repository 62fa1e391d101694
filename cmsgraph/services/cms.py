"""Thin CMS content-delivery client.

The HTTP transport is a plain ``async (url, params) -> httpx.Response``
callable. Behaviour such as dropping the content-version parameter is added
by wrapping it in middleware when the client is built, so no client state is
shared or patched between requests.
"""

import logging
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

import httpx

from cmsgraph.config import get_settings
from cmsgraph.services.paths import join_path, strip_starting_slash
from cmsgraph.services.tags import request_tags

logger = logging.getLogger(__name__)

_CMS_TIMEOUT = 15

Transport = Callable[[str, Dict[str, Any]], Awaitable[httpx.Response]]


async def httpx_transport(url: str, params: Dict[str, Any]) -> httpx.Response:
    async with httpx.AsyncClient(timeout=_CMS_TIMEOUT, follow_redirects=True) as client:
        return await client.get(url, params=params)


def without_cache_version(transport: Transport) -> Transport:
    """Drop the ``cv`` parameter so every request sees the latest content version."""

    async def send(url: str, params: Dict[str, Any]) -> httpx.Response:
        return await transport(url, {k: v for k, v in params.items() if k != "cv"})

    return send


def with_request_tags(transport: Transport) -> Transport:
    """Log the cache tags of each request and warn on unsuccessful responses."""

    async def send(url: str, params: Dict[str, Any]) -> httpx.Response:
        tags = request_tags(str(httpx.URL(url, params=params)))
        logger.debug("CMS request %s", url, extra={"tags": tags})
        response = await transport(url, params)
        if not response.is_success:
            logger.warning("CMS API response status %s for %s", response.status_code, url)
        return response

    return send


class CmsClient:
    """Fetches raw story trees from the CMS content-delivery API."""

    def __init__(
        self,
        token: Optional[str],
        base_url: str,
        defaults: Optional[Mapping[str, Any]] = None,
        transport: Transport = httpx_transport,
        per_page: int = 100,
    ):
        self.token = token
        self.base_url = base_url
        self.defaults = dict(defaults or {})
        self.per_page = per_page
        self._send = without_cache_version(with_request_tags(transport))

    async def _get(self, path: str, params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        query = {**self.defaults, **(params or {})}
        if self.token:
            query["token"] = self.token
        response = await self._send(join_path(self.base_url, path), query)
        response.raise_for_status()
        return response.json()

    async def get_story(self, slug: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Return the raw story at *slug*.

        Raises:
            httpx.HTTPStatusError: on non-success responses (404 for unknown slugs).
            httpx.RequestError: on transport failures.
        """
        data = await self._get(f"stories/{strip_starting_slash(slug)}", params)
        return data["story"]

    async def get_stories(self, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        data = await self._get("stories", {"per_page": self.per_page, **(params or {})})
        return data.get("stories", [])


@lru_cache(maxsize=1)
def get_cms_client() -> CmsClient:
    settings = get_settings()
    return CmsClient(
        settings.token,
        settings.api_url,
        defaults={
            "version": settings.version,
            "resolve_links": settings.resolve_links,
        },
        per_page=settings.stories_per_page,
    )
