from typing import Any, Dict, List

from pydantic import BaseModel, Field


class StoryResponse(BaseModel):
    story: Dict[str, Any]
    tags: List[str] = Field(description="Cache-invalidation tags of the story.")
    description: str
    char_count: int
