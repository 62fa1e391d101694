"""Tests for cmsgraph.services.cms."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from cmsgraph.services.cms import CmsClient, without_cache_version

_BASE = "https://api.example.com/v2/cdn"


def _response(status: int, payload: dict, url: str = _BASE) -> httpx.Response:
    return httpx.Response(status, json=payload, request=httpx.Request("GET", url))


class TestWithoutCacheVersion:
    def test_drops_cv_parameter(self):
        transport = AsyncMock(return_value=_response(200, {}))
        send = without_cache_version(transport)
        asyncio.run(send(f"{_BASE}/stories", {"cv": 123, "version": "draft"}))
        transport.assert_awaited_once_with(f"{_BASE}/stories", {"version": "draft"})


class TestCmsClient:
    def test_get_story(self):
        transport = AsyncMock(return_value=_response(200, {"story": {"full_slug": "blog/a"}}))
        client = CmsClient("secret", _BASE, defaults={"version": "published"}, transport=transport)

        story = asyncio.run(client.get_story("/blog/a", {"cv": 1, "language": "de"}))

        assert story == {"full_slug": "blog/a"}
        url, params = transport.await_args.args
        assert url == f"{_BASE}/stories/blog/a"
        assert params == {"version": "published", "language": "de", "token": "secret"}

    def test_get_stories(self):
        transport = AsyncMock(return_value=_response(200, {"stories": [{"full_slug": "a"}]}))
        client = CmsClient(None, _BASE, transport=transport, per_page=25)

        stories = asyncio.run(client.get_stories({"starts_with": "blog"}))

        assert stories == [{"full_slug": "a"}]
        _, params = transport.await_args.args
        assert params == {"per_page": 25, "starts_with": "blog"}

    def test_not_found_raises(self):
        transport = AsyncMock(return_value=_response(404, {"error": "not found"}))
        client = CmsClient("secret", _BASE, transport=transport)

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(client.get_story("missing"))
