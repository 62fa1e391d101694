import logging

import httpx
from fastapi import APIRouter, HTTPException, Request

from cmsgraph.models.webhook import WebhookPayload, WebhookResponse
from cmsgraph.ratelimit import limiter
from cmsgraph.services.cms import get_cms_client
from cmsgraph.services.invalidation import invalidate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/webhook",
    response_model=WebhookResponse,
    summary="Invalidate cached pages after a publish event",
    description=(
        "Looks up every story under `full_slug`, derives its cache tags "
        "(uuid, content type, page and folder-index tags) and invalidates "
        "each distinct tag once."
    ),
)
@limiter.limit("30/minute")
async def webhook(request: Request, body: WebhookPayload) -> WebhookResponse:
    logger.info(
        "Webhook received",
        extra={
            "action": body.action,
            "slug": body.full_slug,
            "story_id": body.story_id,
            "event": body.text,
        },
    )

    try:
        tags = await invalidate(body, get_cms_client())
    except httpx.HTTPStatusError as exc:
        logger.error("CMS error listing stories under %s: %s", body.full_slug, exc)
        raise HTTPException(
            status_code=502, detail=f"CMS returned HTTP {exc.response.status_code}."
        )
    except httpx.RequestError as exc:
        logger.error("Error listing stories under %s: %s", body.full_slug, exc)
        raise HTTPException(status_code=502, detail=str(exc))

    return WebhookResponse(ok=True, tags=sorted(tags))
