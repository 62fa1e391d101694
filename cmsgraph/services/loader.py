"""Story loading: fetch, rewrite links, resolve data."""

import logging
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode

from cmsgraph.config import get_settings
from cmsgraph.models.context import ResolverContext
from cmsgraph.services.assets import Fetch
from cmsgraph.services.cms import CmsClient, get_cms_client
from cmsgraph.services.fetcher import fetch_text
from cmsgraph.services.links import DEFAULT_LANGUAGE, rewrite_links
from cmsgraph.services.resolver import Resolvers, default_registry, resolve_data

logger = logging.getLogger(__name__)


class StoryLoader:
    """Loads stories and turns them into render-ready trees.

    Resolvers receive a :class:`ResolverContext` that also carries the
    story being resolved (``context.story``) and the loader itself
    (``context.loader``), so they can fetch related stories.
    """

    def __init__(
        self,
        client: CmsClient,
        resolvers: Resolvers,
        public_url_prefix: str = "",
        preview_params: Optional[Mapping[str, str]] = None,
        default_language: str = DEFAULT_LANGUAGE,
        fetch: Fetch = fetch_text,
    ):
        self.client = client
        self.resolvers = resolvers
        self.public_url_prefix = public_url_prefix
        self.preview_params = dict(preview_params or {})
        self.default_language = default_language
        self.fetch = fetch

    def rewrite_links(self, value: Any) -> None:
        rewrite_links(value, self.public_url_prefix, self.preview_params, self.default_language)

    async def get_story(
        self,
        slug: str,
        params: Optional[Mapping[str, Any]] = None,
        locale: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fetch the story at *slug* and resolve it.

        CMS errors propagate; resolution failures never do.
        """
        story = await self.client.get_story(slug, params)
        self.rewrite_links(story)
        version = {**self.client.defaults, **(params or {})}.get("version")

        context = ResolverContext(
            prefix=self.public_url_prefix,
            locale=locale,
            revalidate=version == "draft",
            params=self.preview_params,
            default_language=self.default_language,
            story=story,
            loader=self,
        )
        await resolve_data(story, self.resolvers, context, self.fetch)
        story["preview_params"] = urlencode(self.preview_params) or None

        logger.info(
            "Story loaded",
            extra={"slug": slug, "resolved": len(story["resolved_data"])},
        )
        return story

    async def get_stories(self, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Fetch a list of stories with rewritten links, without resolving data."""
        stories = await self.client.get_stories(params)
        for story in stories:
            self.rewrite_links(story)
        return stories


@lru_cache(maxsize=1)
def get_loader() -> StoryLoader:
    settings = get_settings()
    return StoryLoader(
        get_cms_client(),
        default_registry,
        public_url_prefix=settings.public_url_prefix,
        default_language=settings.default_language,
    )
