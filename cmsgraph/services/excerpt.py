"""Plain-text excerpts of a story: headlines, body text and images.

Used to derive descriptions and reading-size metrics without rendering.
"""

import re
from typing import Any, Dict, List, NamedTuple, Optional

from cmsgraph.services.nodes import NodeKind, classify

_HEADLINE_KEY_RE = re.compile(r"head|line|title|slogan", re.IGNORECASE)
_TEXT_KEY_RE = re.compile(r"text|description", re.IGNORECASE)
_SENTENCE_END_RE = re.compile(r"([.!?])")


class Excerpt(NamedTuple):
    images: List[Dict[str, Any]]
    headlines: List[str]
    text: List[str]


def image_to_asset(image: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a rich-text image node into the asset shape."""
    attrs = image["attrs"]
    return {
        "fieldtype": "asset",
        "id": attrs.get("id", -1),
        "filename": attrs["src"],
        "alt": attrs.get("alt") or "",
        "name": attrs.get("name") or "",
        "title": attrs.get("title") or "",
        "svg": attrs.get("svg"),
    }


def extract(value: Any) -> Excerpt:
    excerpt = Excerpt(images=[], headlines=[], text=[])
    _collect(value, excerpt)
    return excerpt


def char_count(value: Any) -> int:
    """Total length of all headlines and text found in *value*."""
    excerpt = extract(value)
    return sum(len(s) for s in excerpt.headlines) + sum(len(s) for s in excerpt.text)


def full_sentences(text: List[str], max_chars: int = 500) -> str:
    """Join *text*, cut at *max_chars* and drop a trailing incomplete sentence."""
    parts = _SENTENCE_END_RE.split("\n".join(text)[:max_chars])
    # parts alternate sentence / terminator; keep complete pairs only
    keep = len(parts) - len(parts) % 2 if len(parts) > 1 else 1
    return "".join(parts[:keep])


def _collect(value: Any, excerpt: Excerpt, key: Optional[str] = None) -> None:
    kind = classify(value)

    if key and isinstance(value, str):
        if _HEADLINE_KEY_RE.search(key):
            excerpt.headlines.append(value)
        if _TEXT_KEY_RE.search(key):
            excerpt.text.append(value)
    elif kind is NodeKind.ASSET:
        excerpt.images.append(value)
    elif kind is NodeKind.SEQUENCE:
        for item in value:
            _collect(item, excerpt)
    elif kind is NodeKind.RICHTEXT_DOC:
        _collect_richtext(value, excerpt)
    elif isinstance(value, dict):
        for k, v in value.items():
            _collect(v, excerpt, k)


def _collect_richtext(value: Any, excerpt: Excerpt, in_heading: bool = False) -> None:
    kind = classify(value)

    if kind is NodeKind.TEXT:
        excerpt.text.append(value["text"])
        if in_heading:
            excerpt.headlines.append(value["text"])
    elif kind is NodeKind.IMAGE:
        excerpt.images.append(image_to_asset(value))
    elif isinstance(value, dict) and isinstance(value.get("type"), str) and isinstance(
        value.get("content"), list
    ):
        _collect_richtext(
            value["content"], excerpt, in_heading or value["type"] == "heading"
        )
    elif isinstance(value, list):
        for item in value:
            _collect_richtext(item, excerpt, in_heading)
