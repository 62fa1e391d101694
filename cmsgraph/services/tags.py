"""Cache-invalidation tags derived from story identity.

A rendered page is cached under the tags of the story it shows; publishing a
story invalidates the same tags. Three kinds exist:

* page tags – the story path without trailing slash (``blog/post``),
* index tags – the parent folder plus ``.index`` (``blog.index``), shared by
  all pages listing the folder,
* content-type tags – ``type:<component>``.
"""

import re
from typing import Any, Dict, List, Set
from urllib.parse import parse_qs, urlparse

from cmsgraph.services.paths import remove_last_folder, strip_ending_slash

_STORY_PATH_RE = re.compile(r"cdn/stories/(.+)$")


def page_tag(slug: str) -> str:
    return strip_ending_slash(slug)


def index_tag(slug: str) -> str:
    return f"{strip_ending_slash(slug)}.index"


def content_type_tag(component: str) -> str:
    return f"type:{component}"


def story_paths(story: Dict[str, Any]) -> Set[str]:
    """Return every localized path under which *story* is published."""
    paths = {story.get("path") or story["full_slug"]}
    for entry in story.get("translated_slugs") or []:
        if entry.get("path"):
            paths.add(entry["path"])
    return paths


def page_tags(story: Dict[str, Any]) -> Set[str]:
    """Return the invalidation tags of *story*.

    The result is a pure function of the story's uuid, content type and
    localized paths.
    """
    tags = {story["uuid"], content_type_tag(story["content"]["component"])}
    for path in story_paths(story):
        tags.add(page_tag(path))
        tags.add(index_tag(remove_last_folder(path)))
    return tags


def request_tags(url: str) -> List[str]:
    """Return the tags a cached CMS API response for *url* should carry."""
    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    tags: List[str] = []

    match = _STORY_PATH_RE.search(parsed.path)
    if match:
        tags.append(page_tag(match.group(1)))

    for content_type in query.get("content_type", []):
        tags.append(content_type_tag(content_type))

    for by_slugs in query.get("by_slugs", []):
        for slug in by_slugs.split(","):
            if "*" in slug:
                tags.append(index_tag(slug.replace("/*", "")))
            else:
                tags.append(page_tag(slug))

    return tags
