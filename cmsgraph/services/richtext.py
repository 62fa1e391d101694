"""Rich-text document restructuring for layout purposes.

Two transforms, usually applied in this order:

:func:`hoist_images`
    Lifts images out of the paragraphs that contain them so they can be
    laid out as block-level siblings.

:func:`inline_components`
    Merges an inline component block into the preceding paragraph, together
    with the paragraph that directly follows it, so that text flows around it.

Both leave their input untouched and return new documents.
"""

import re
from typing import Any, Callable, Dict, List, Optional, Pattern, Union

from pydantic import BaseModel, ConfigDict

from cmsgraph.services.nodes import NodeKind, classify

DEFAULT_INLINE_PATTERN = re.compile("inline", re.IGNORECASE)

InlinePattern = Union[bool, str, Pattern[str]]


class RichTextOptions(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    hoist_images: bool = False
    inline_components: InlinePattern = False
    transform: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None


def _is_type(node: Any, node_type: str) -> bool:
    return isinstance(node, dict) and node.get("type") == node_type


def hoist_images(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Split top-level paragraphs around the images they contain.

    ``paragraph([text, image, text])`` becomes
    ``paragraph([text]), image, paragraph([text])``. The last paragraph of a
    split run is always emitted, even when empty.
    """
    content: List[Any] = []
    for node in doc.get("content") or []:
        if not _is_type(node, "paragraph"):
            content.append(node)
            continue

        run: List[Any] = []
        for child in node.get("content") or []:
            if _is_type(child, "image"):
                if run:
                    content.append({**node, "content": run})
                content.append(child)
                run = []
            else:
                run.append(child)
        content.append({**node, "content": run})

    return {**doc, "content": content}


def _compile(pattern: InlinePattern) -> Optional[Pattern[str]]:
    if pattern is True:
        return DEFAULT_INLINE_PATTERN
    if pattern is False:
        return None
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


def _component_names(node: Any) -> List[str]:
    kind = classify(node)
    if kind is NodeKind.BLOCK:
        return [node["component"]]
    if kind is NodeKind.RICHTEXT_BLOK:
        body = node["attrs"].get("body") or []
        return [b["component"] for b in body if classify(b) is NodeKind.BLOCK]
    return []


def _is_inline(node: Any, regex: Pattern[str]) -> bool:
    return any(regex.search(name) for name in _component_names(node))


def _splice(node: Dict[str, Any], regex: Pattern[str]) -> Dict[str, Any]:
    children = node.get("content")
    if not isinstance(children, list):
        return node

    out: List[Any] = []
    i = 0
    while i < len(children):
        child = children[i]
        if _is_inline(child, regex) and out and _is_type(out[-1], "paragraph"):
            merged = [*(out[-1].get("content") or []), child]
            following = children[i + 1] if i + 1 < len(children) else None
            if _is_type(following, "paragraph"):
                merged.extend(following.get("content") or [])
                i += 1
            out[-1] = {**out[-1], "content": merged}
        elif _is_type(child, "bullet_list"):
            out.append(
                {
                    **child,
                    "content": [
                        _splice(item, regex) if _is_type(item, "list_item") else item
                        for item in child.get("content") or []
                    ],
                }
            )
        else:
            out.append(child)
        i += 1

    return {**node, "content": out}


def inline_components(doc: Dict[str, Any], pattern: InlinePattern = True) -> Dict[str, Any]:
    """Splice inline component blocks into the surrounding paragraphs.

    *pattern* selects which components count as inline: ``True`` matches any
    component name containing "inline" (case-insensitive), ``False`` disables
    the transform, a string or compiled pattern is searched in the name.
    Descends into bullet lists only.
    """
    regex = _compile(pattern)
    if regex is None:
        return doc
    return _splice(doc, regex)


def prepare_richtext(doc: Dict[str, Any], options: RichTextOptions) -> Dict[str, Any]:
    """Apply the configured transforms: hoist, inline, then custom."""
    if options.hoist_images:
        doc = hoist_images(doc)
    doc = inline_components(doc, options.inline_components)
    if options.transform is not None:
        doc = options.transform(doc)
    return doc


def prepare_richtext_fields(value: Any, options: RichTextOptions) -> None:
    """Replace every rich-text document nested in *value* with its prepared form."""
    if isinstance(value, list):
        for i, item in enumerate(value):
            if classify(item) is NodeKind.RICHTEXT_DOC:
                value[i] = prepare_richtext(item, options)
            else:
                prepare_richtext_fields(item, options)
    elif isinstance(value, dict):
        for key, item in list(value.items()):
            if classify(item) is NodeKind.RICHTEXT_DOC:
                value[key] = prepare_richtext(item, options)
            else:
                prepare_richtext_fields(item, options)
