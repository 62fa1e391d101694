"""Resolver dispatch: enrich a story tree with externally resolved data.

:func:`resolve_data` walks the whole story once, synchronously and depth
first. Along the way it

* schedules the registered resolver of every block whose ``component`` has
  one,
* schedules an inline fetch for every SVG asset or rich-text image,
* rewrites every other node's links in place.

The scheduled tasks are returned by the walk and awaited together afterwards.
When a resolver yields a partial update it is merged back into its block in
a fixed order: inline nested SVGs, record under ``_uid``, deep-merge, then
rewrite links on the merged block.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from cmsgraph.models.context import ResolverContext
from cmsgraph.services.assets import AssetCache, Fetch, inline_svg, inline_svgs, should_inline
from cmsgraph.services.fetcher import fetch_text
from cmsgraph.services.links import rewrite_link, rewrite_links
from cmsgraph.services.nodes import NodeKind, classify, deep_merge

logger = logging.getLogger(__name__)

Resolver = Callable[[Dict[str, Any], ResolverContext, List[Any]], Awaitable[Optional[Dict[str, Any]]]]
Resolvers = Mapping[str, Resolver]


class ResolverRegistry(Dict[str, Resolver]):
    """Resolvers keyed by block component name.

    Usage::

        @registry.register("product_teaser")
        async def load_product(block, context, ancestors):
            return {"product": await fetch_product(block["sku"])}
    """

    def register(self, component: str) -> Callable[[Resolver], Resolver]:
        def decorator(func: Resolver) -> Resolver:
            self[component] = func
            return func

        return decorator


default_registry = ResolverRegistry()


class ResolutionPass:
    """State of one resolution pass: resolved data, asset cache, pending tasks."""

    def __init__(self, resolvers: Resolvers, context: ResolverContext, fetch: Fetch = fetch_text):
        self.resolvers = resolvers
        self.context = context
        self.fetch = fetch
        self.data: Dict[str, Any] = {}
        self.cache = AssetCache()
        self.tasks: List["asyncio.Task[None]"] = []

    def collect(self, value: Any) -> List["asyncio.Task[None]"]:
        """Walk *value* and return the tasks scheduled along the way."""
        self._walk(value, [])
        return self.tasks

    def cancel(self) -> None:
        for task in self.tasks:
            task.cancel()

    def _rewrite(self, value: Any) -> None:
        ctx = self.context
        rewrite_link(value, ctx.prefix, ctx.params, ctx.default_language)

    def _walk(self, value: Any, ancestors: List[Any]) -> None:
        kind = classify(value)

        if kind is NodeKind.SEQUENCE:
            for item in value:
                self._walk(item, ancestors)
            return

        if kind is NodeKind.SCALAR:
            return

        resolver = self.resolvers.get(value["component"]) if kind is NodeKind.BLOCK else None
        if resolver is not None:
            self.tasks.append(asyncio.ensure_future(self._resolve(value, resolver, list(ancestors))))
        elif should_inline(value):
            self.tasks.append(asyncio.ensure_future(self._inline(value)))
        else:
            self._rewrite(value)

        chain = [value, *ancestors]
        for child in list(value.values()):
            self._walk(child, chain)

    async def _inline(self, node: Dict[str, Any]) -> None:
        try:
            await inline_svg(node, self.cache, self.fetch)
        except Exception:
            logger.exception("Failed to inline asset %s", node.get("id"))

    async def _resolve(self, block: Dict[str, Any], resolver: Resolver, ancestors: List[Any]) -> None:
        component = block["component"]
        try:
            resolved = await resolver(block, self.context, ancestors)
            if not resolved:
                return
            if not isinstance(resolved, dict):
                logger.warning(
                    "Resolver for %s returned %s, expected a mapping",
                    component,
                    type(resolved).__name__,
                )
                return

            await inline_svgs(resolved, self.cache, self.fetch)
            self.data[block["_uid"]] = resolved
            deep_merge(block, resolved)
            ctx = self.context
            rewrite_links(block, ctx.prefix, ctx.params, ctx.default_language)
        except Exception:
            logger.exception("Failed to resolve data for component %s", component)


async def resolve_data(
    story: Dict[str, Any],
    resolvers: Resolvers,
    context: ResolverContext,
    fetch: Fetch = fetch_text,
) -> Dict[str, Any]:
    """Resolve *story* in place and return the resolved-data map.

    Never raises: per-node failures are logged and skipped. If the walk itself
    fails, nothing is resolved and the map stays empty.
    """
    resolution = ResolutionPass(resolvers, context, fetch)
    started = time.perf_counter()

    try:
        tasks = resolution.collect(story)
    except Exception:
        logger.exception("Failed to resolve data for story %s", story.get("full_slug"))
        resolution.cancel()
        await asyncio.gather(*resolution.tasks, return_exceptions=True)
        data: Dict[str, Any] = {}
    else:
        logger.debug(
            "resolve_data: collected %d tasks in %.1f ms",
            len(tasks),
            (time.perf_counter() - started) * 1000,
        )
        await asyncio.gather(*tasks)
        data = resolution.data
        logger.debug("resolve_data: done in %.1f ms", (time.perf_counter() - started) * 1000)

    story["resolved_data"] = data
    story["public_url_prefix"] = context.prefix
    return data
