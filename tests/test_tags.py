"""Tests for cmsgraph.services.tags."""

from cmsgraph.services.tags import (
    content_type_tag,
    index_tag,
    page_tag,
    page_tags,
    request_tags,
)


def _story(full_slug: str, uuid: str = "uuid-1", **extra) -> dict:
    story = {"uuid": uuid, "full_slug": full_slug, "content": {"component": "post", "_uid": "1"}}
    story.update(extra)
    return story


class TestTagHelpers:
    def test_page_tag_strips_trailing_slash(self):
        assert page_tag("blog/") == "blog"

    def test_index_tag(self):
        assert index_tag("blog/") == "blog.index"

    def test_content_type_tag(self):
        assert content_type_tag("post") == "type:post"


class TestPageTags:
    def test_contains_uuid_and_content_type(self):
        tags = page_tags(_story("blog/a"))
        assert "uuid-1" in tags
        assert "type:post" in tags

    def test_page_and_index_tags(self):
        assert page_tags(_story("blog/a")) == {"uuid-1", "type:post", "blog/a", "blog.index"}

    def test_siblings_share_index_tag(self):
        a = page_tags(_story("/blog/a", uuid="a"))
        b = page_tags(_story("/blog/b", uuid="b"))
        assert "/blog.index" in a
        assert "/blog.index" in b

    def test_folder_story_with_trailing_slash(self):
        tags = page_tags(_story("blog/"))
        assert "blog" in tags
        assert ".index" in tags

    def test_translated_slugs_add_paths(self):
        story = _story(
            "blog/a",
            translated_slugs=[
                {"lang": "de", "path": "de/blog/beitrag"},
                {"lang": "en", "path": "blog/a"},
            ],
        )
        assert page_tags(story) == {
            "uuid-1",
            "type:post",
            "blog/a",
            "blog.index",
            "de/blog/beitrag",
            "de/blog.index",
        }

    def test_path_override_replaces_full_slug(self):
        tags = page_tags(_story("blog/a", path="news/a"))
        assert "news/a" in tags
        assert "blog/a" not in tags

    def test_deterministic(self):
        story = _story("blog/a", translated_slugs=[{"lang": "de", "path": "de/blog/a"}])
        assert page_tags(story) == page_tags(story)


class TestRequestTags:
    def test_story_slug_and_content_type(self):
        url = "https://api.example.com/v2/cdn/stories/blog/a?content_type=post"
        assert request_tags(url) == ["blog/a", "type:post"]

    def test_by_slugs_page_tags(self):
        url = "https://api.example.com/v2/cdn/stories?by_slugs=blog/a,blog/b/"
        assert request_tags(url) == ["blog/a", "blog/b"]

    def test_by_slugs_wildcard_index_tags(self):
        url = "https://api.example.com/v2/cdn/stories?by_slugs=blog/*"
        assert request_tags(url) == ["blog.index"]

    def test_no_tags(self):
        assert request_tags("https://api.example.com/v2/cdn/links") == []
