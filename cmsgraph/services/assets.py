"""Inline SVG assets: fetch the markup once and embed it in the tree."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Hashable

import httpx

from cmsgraph.services.fetcher import fetch_text
from cmsgraph.services.nodes import NodeKind, classify

logger = logging.getLogger(__name__)

SVG_SUFFIX = ".svg"

Fetch = Callable[[str], Awaitable[str]]


class AssetCache(dict):
    """Fetched SVG markup keyed by asset id, scoped to one resolution pass."""


def _source(node: Dict[str, Any]) -> str:
    if classify(node) is NodeKind.IMAGE:
        return node["attrs"]["src"]
    return node["filename"]


def _target(node: Dict[str, Any]) -> Dict[str, Any]:
    """Rich-text images keep their data in ``attrs``."""
    if classify(node) is NodeKind.IMAGE:
        return node["attrs"]
    return node


def _asset_key(node: Dict[str, Any]) -> Hashable:
    asset_id = _target(node).get("id")
    return asset_id if asset_id is not None else _source(node)


def should_inline(value: Any) -> bool:
    """Return True for assets and rich-text images pointing to an SVG file."""
    kind = classify(value)
    if kind is NodeKind.ASSET:
        return value["filename"].endswith(SVG_SUFFIX)
    if kind is NodeKind.IMAGE:
        return value["attrs"]["src"].endswith(SVG_SUFFIX)
    return False


async def inline_svg(node: Dict[str, Any], cache: AssetCache, fetch: Fetch = fetch_text) -> None:
    """Attach the SVG markup of *node* as its ``svg`` field.

    A cache hit skips the fetch. Concurrent first requests for the same id
    are not de-duplicated: each fetches and the last one to finish wins.
    """
    key = _asset_key(node)
    target = _target(node)

    if key in cache:
        target["svg"] = cache[key]
        return

    src = _source(node)
    try:
        svg = await fetch(src)
    except (httpx.HTTPError, ValueError, RuntimeError) as exc:
        logger.error("Failed to fetch asset %s: %s", src, exc)
        return

    cache[key] = svg
    target["svg"] = svg


async def inline_svgs(value: Any, cache: AssetCache, fetch: Fetch = fetch_text) -> None:
    """Inline every SVG asset nested anywhere in *value*."""
    if should_inline(value):
        await inline_svg(value, cache, fetch)
    elif isinstance(value, dict):
        await asyncio.gather(*(inline_svgs(v, cache, fetch) for v in value.values()))
    elif isinstance(value, list):
        await asyncio.gather(*(inline_svgs(v, cache, fetch) for v in value))
