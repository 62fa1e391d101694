from typing import List, Optional

from pydantic import BaseModel, Field


class WebhookPayload(BaseModel):
    """Body of a CMS publish/unpublish webhook."""

    action: str = Field(min_length=1, examples=["published", "unpublished", "deleted"])
    full_slug: str = Field(min_length=1, examples=["blog/my-post"])
    text: Optional[str] = Field(None, description="Human-readable event summary sent by the CMS.")
    story_id: Optional[int] = Field(None, description="Id of the story that triggered the event.")


class WebhookResponse(BaseModel):
    ok: bool
    tags: List[str]
