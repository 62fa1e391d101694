"""Content-tree node decoding.

Stories arrive from the CMS as untyped JSON: nested ``dict``/``list`` values
whose meaning is carried by a few discriminant fields. :func:`classify` maps
any such value onto a closed set of :class:`NodeKind` variants so the rest of
the pipeline can dispatch on the variant instead of re-inspecting shapes.

Variants
--------
``BLOCK``
    A content block: ``component`` and ``_uid`` are both strings.

``ASSET``
    An uploaded asset (``fieldtype == "asset"``) with a string ``filename``.

``STORY_LINK`` / ``URL_LINK`` / ``EMAIL_LINK`` / ``ASSET_LINK``
    Multilink values discriminated by ``linktype``.

``STORY``
    A story: string ``full_slug`` plus a ``content`` block.

``DOC_LINK``
    A rich-text link mark whose ``attrs.story`` carries ``url``/``full_slug``.

``RICHTEXT_*`` / ``PARAGRAPH`` / ``TEXT`` / ``IMAGE`` / ``BULLET_LIST`` / ``LIST_ITEM``
    Rich-text document nodes discriminated by ``type``.
"""

import enum
from typing import Any, Dict


class NodeKind(enum.Enum):
    BLOCK = "block"
    ASSET = "asset"
    STORY_LINK = "story_link"
    URL_LINK = "url_link"
    EMAIL_LINK = "email_link"
    ASSET_LINK = "asset_link"
    STORY = "story"
    DOC_LINK = "doc_link"
    RICHTEXT_DOC = "doc"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    IMAGE = "image"
    BULLET_LIST = "bullet_list"
    LIST_ITEM = "list_item"
    RICHTEXT_BLOK = "blok"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    SCALAR = "scalar"


_RICHTEXT_KINDS = {
    "doc": NodeKind.RICHTEXT_DOC,
    "paragraph": NodeKind.PARAGRAPH,
    "bullet_list": NodeKind.BULLET_LIST,
    "list_item": NodeKind.LIST_ITEM,
}


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _classify_mapping(value: Dict[str, Any]) -> NodeKind:
    if _is_str(value.get("component")) and _is_str(value.get("_uid")):
        return NodeKind.BLOCK

    if value.get("fieldtype") == "asset" and _is_str(value.get("filename")):
        return NodeKind.ASSET

    linktype = value.get("linktype")
    if linktype == "story":
        return NodeKind.STORY_LINK
    if linktype == "url" and _is_str(value.get("url")):
        return NodeKind.URL_LINK
    if linktype == "email" and _is_str(value.get("email")):
        return NodeKind.EMAIL_LINK
    if linktype == "asset":
        return NodeKind.ASSET_LINK

    content = value.get("content")
    if (
        _is_str(value.get("full_slug"))
        and isinstance(content, dict)
        and _is_str(content.get("component"))
    ):
        return NodeKind.STORY

    node_type = value.get("type")
    attrs = value.get("attrs")
    if node_type == "text" and _is_str(value.get("text")):
        return NodeKind.TEXT
    if node_type == "image" and isinstance(attrs, dict) and _is_str(attrs.get("src")):
        return NodeKind.IMAGE
    if node_type == "link" and isinstance(attrs, dict):
        story = attrs.get("story")
        if isinstance(story, dict) and _is_str(story.get("url")) and _is_str(story.get("full_slug")):
            return NodeKind.DOC_LINK
    if node_type == "blok" and isinstance(attrs, dict):
        return NodeKind.RICHTEXT_BLOK
    if node_type in _RICHTEXT_KINDS and isinstance(content, list):
        return _RICHTEXT_KINDS[node_type]

    return NodeKind.MAPPING


def classify(value: Any) -> NodeKind:
    """Return the :class:`NodeKind` variant of an arbitrary JSON *value*."""
    if isinstance(value, dict):
        return _classify_mapping(value)
    if isinstance(value, list):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """Merge *source* into *target* in place and return *target*.

    Nested mappings merge recursively; lists and scalars overwrite.
    """
    for key, value in source.items():
        existing = target.get(key)
        if isinstance(value, dict) and isinstance(existing, dict):
            deep_merge(existing, value)
        else:
            target[key] = value
    return target
