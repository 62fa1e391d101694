"""Webhook-driven cache invalidation."""

import logging
from typing import Any, Callable, Iterable, Optional, Set, Union

from cmsgraph.models.webhook import WebhookPayload
from cmsgraph.services.cms import CmsClient
from cmsgraph.services.tags import page_tags

logger = logging.getLogger(__name__)

InvalidateTag = Callable[[str], None]
ProcessTag = Callable[[str], Iterable[str]]


def log_invalidation(tag: str) -> None:
    """Default invalidation collaborator: only records the tag in the log."""
    logger.info("Revalidate '%s'", tag)


async def invalidate(
    payload: Union[WebhookPayload, Any],
    client: CmsClient,
    invalidate_tag: InvalidateTag = log_invalidation,
    process_tag: Optional[ProcessTag] = None,
) -> Set[str]:
    """Invalidate the cache tags of every story under ``payload.full_slug``.

    *process_tag* may expand each derived tag into several host-specific ones.
    Each distinct tag is passed to *invalidate_tag* exactly once.

    Raises:
        pydantic.ValidationError: if *payload* is malformed.
        httpx.HTTPError: if the stories cannot be listed.
    """
    if not isinstance(payload, WebhookPayload):
        payload = WebhookPayload.model_validate(payload)

    slug = payload.full_slug
    stories = await client.get_stories({"starts_with": slug})
    if not stories:
        logger.warning("Not revalidating - no stories found for slug %s", slug)
        return set()

    tags: Set[str] = set()
    for story in stories:
        for tag in page_tags(story):
            tags.update(process_tag(tag) if process_tag else [tag])

    for tag in sorted(tags):
        invalidate_tag(tag)

    logger.info(
        "Webhook processed",
        extra={"action": payload.action, "slug": slug, "stories": len(stories), "tags": len(tags)},
    )
    return tags
