"""Link rewriting: turn story references into canonical public URLs.

Every link-shaped node gets a ``public_url`` field (rich-text link marks get
their ``attrs.href`` replaced instead). How the target path is found depends
on how the CMS resolved the link when the story was fetched:

* ``resolve_links=url`` embeds ``story.url``, used as-is.
* ``resolve_links=story`` embeds the whole story, whose canonical path is
  computed by :func:`story_path`.
* Without link resolution only ``cached_url`` is available.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from cmsgraph.services.nodes import NodeKind, classify
from cmsgraph.services.paths import extend_url, join_path, remove_first_folder

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "default"


def story_path(story: Dict[str, Any], default_language: str = DEFAULT_LANGUAGE) -> str:
    """Return the canonical URL path of *story*.

    First matching rule wins:

    1. an explicit ``path`` override,
    2. the published translated slug matching the story's ``lang``,
    3. ``default_full_slug``,
    4. ``full_slug`` for stories in the default language,
    5. ``full_slug`` without its leading locale folder.
    """
    path = story.get("path")
    if path:
        return path

    lang = story.get("lang")
    translated = story.get("translated_slugs")
    if lang and isinstance(translated, list):
        for entry in translated:
            if (
                isinstance(entry, dict)
                and entry.get("lang") == lang
                and entry.get("published")
                and entry.get("path")
            ):
                return entry["path"]

    default_full_slug = story.get("default_full_slug")
    if default_full_slug:
        return default_full_slug

    full_slug = story.get("full_slug") or ""
    if lang is None or lang == default_language:
        return full_slug
    return remove_first_folder(full_slug)


def story_link_path(
    link: Dict[str, Any], default_language: str = DEFAULT_LANGUAGE
) -> Optional[str]:
    """Return the target path of a story multilink, or *None* when unset."""
    if not link.get("id"):
        # no story selected
        return None

    story = link.get("story")
    if isinstance(story, dict):
        if story.get("url"):
            return story["url"]
        if "url" not in story:
            return story_path(story, default_language)

    return link.get("cached_url")


def doc_link_story_path(story: Dict[str, Any]) -> str:
    """Return the path for a story embedded in a rich-text link mark."""
    if story.get("url") == story.get("full_slug"):
        return story["full_slug"]
    return join_path(*[p for p in story["full_slug"].split("/") if p][1:])


def rewrite_story(
    story: Dict[str, Any],
    prefix: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
    default_language: str = DEFAULT_LANGUAGE,
) -> Dict[str, Any]:
    """Set ``public_url`` on *story* and return it."""
    story["public_url"] = extend_url(story_path(story, default_language), prefix, params)
    return story


def rewrite_link(
    value: Any,
    prefix: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
    default_language: str = DEFAULT_LANGUAGE,
) -> None:
    """Compute the public URL of a single link-shaped *value* in place.

    Values that are not links are left untouched. A link whose target cannot
    be parsed as a URL is logged and keeps no public URL.
    """
    try:
        _rewrite_link(value, prefix, params, default_language)
    except ValueError as exc:
        logger.warning("Cannot rewrite link %r: %s", value.get("cached_url"), exc)


def _rewrite_link(
    value: Any,
    prefix: Optional[str],
    params: Optional[Mapping[str, str]],
    default_language: str,
) -> None:
    kind = classify(value)

    if kind is NodeKind.STORY_LINK:
        path = story_link_path(value, default_language)
        if path:
            value["public_url"] = extend_url(path, prefix, params)
    elif kind is NodeKind.DOC_LINK:
        value["attrs"]["href"] = extend_url(
            doc_link_story_path(value["attrs"]["story"]), prefix, params
        )
    elif kind is NodeKind.STORY:
        rewrite_story(value, prefix, params, default_language)
    elif kind is NodeKind.URL_LINK:
        value["public_url"] = value["url"]
    elif kind is NodeKind.EMAIL_LINK:
        value["public_url"] = f"mailto:{value['email']}"


def rewrite_links(
    value: Any,
    prefix: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
    default_language: str = DEFAULT_LANGUAGE,
) -> None:
    """Recursively rewrite every link found in *value*."""
    if isinstance(value, list):
        for item in value:
            rewrite_links(item, prefix, params, default_language)
    elif isinstance(value, dict):
        rewrite_link(value, prefix, params, default_language)
        for item in list(value.values()):
            rewrite_links(item, prefix, params, default_language)
