import logging
from typing import Literal, Optional

import httpx
from fastapi import APIRouter, HTTPException, Query, Request

from cmsgraph.models.story import StoryResponse
from cmsgraph.ratelimit import limiter
from cmsgraph.services.excerpt import char_count, extract, full_sentences
from cmsgraph.services.loader import get_loader
from cmsgraph.services.richtext import RichTextOptions, prepare_richtext_fields
from cmsgraph.services.tags import page_tags

logger = logging.getLogger(__name__)

router = APIRouter()

_DESCRIPTION_CHARS = 160


@router.get(
    "/stories/{slug:path}",
    response_model=StoryResponse,
    summary="Load a story with resolved data and public URLs",
    description=(
        "Fetches the story at *slug* from the CMS, rewrites every link to its "
        "public URL, runs the registered data resolvers and inlines SVG assets.\n\n"
        "Pass `hoist_images` / `inline_components` to restructure rich-text "
        "fields for layout."
    ),
)
@limiter.limit("60/minute")
async def get_story(
    request: Request,
    slug: str,
    version: Literal["draft", "published"] = Query(default="published"),
    language: Optional[str] = Query(default=None, description="Locale to load."),
    hoist_images: bool = Query(default=False),
    inline_components: bool = Query(default=False),
) -> StoryResponse:
    """Return the resolved story at *slug* together with its cache tags."""
    logger.info("Story request received", extra={"slug": slug, "version": version})

    params = {"version": version}
    if language:
        params["language"] = language

    try:
        story = await get_loader().get_story(slug, params, locale=language)
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code == 404:
            raise HTTPException(status_code=404, detail="Story not found.")
        logger.error("CMS error loading story %s: %s", slug, exc)
        raise HTTPException(
            status_code=502, detail=f"CMS returned HTTP {exc.response.status_code}."
        )
    except httpx.RequestError as exc:
        logger.error("Error loading story %s: %s", slug, exc)
        raise HTTPException(status_code=502, detail=str(exc))

    if hoist_images or inline_components:
        options = RichTextOptions(hoist_images=hoist_images, inline_components=inline_components)
        prepare_richtext_fields(story["content"], options)

    excerpt = extract(story["content"])
    return StoryResponse(
        story=story,
        tags=sorted(page_tags(story)),
        description=full_sentences(excerpt.text, _DESCRIPTION_CHARS),
        char_count=char_count(story["content"]),
    )
