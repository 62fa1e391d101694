from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResolverContext(BaseModel):
    """Context handed unchanged to every resolver invocation.

    Hosts may attach extra capabilities (for example a sibling-story fetch
    function) as additional attributes; they are passed through as-is.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    prefix: str = ""
    locale: Optional[str] = None
    revalidate: bool = False
    params: Dict[str, str] = Field(
        default_factory=dict,
        description="Query parameters appended to every rewritten URL.",
    )
    default_language: str = "default"
