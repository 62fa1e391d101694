"""Tests for cmsgraph.services.richtext."""

import copy
import re

from cmsgraph.services.richtext import (
    RichTextOptions,
    hoist_images,
    inline_components,
    prepare_richtext,
    prepare_richtext_fields,
)


def _text(value: str) -> dict:
    return {"type": "text", "text": value}


def _image(src: str = "https://a.example.com/f/1/pic.png") -> dict:
    return {"type": "image", "attrs": {"id": 1, "src": src, "alt": ""}}


def _paragraph(*children) -> dict:
    return {"type": "paragraph", "content": list(children)}


def _blok(component: str) -> dict:
    return {
        "type": "blok",
        "attrs": {"id": "b1", "body": [{"component": component, "_uid": "u1"}]},
    }


def _doc(*children) -> dict:
    return {"type": "doc", "content": list(children)}


class TestHoistImages:
    def test_splits_paragraph_around_image(self):
        doc = _doc(_paragraph(_text("a"), _image(), _text("b")))
        result = hoist_images(doc)
        assert result["content"] == [
            _paragraph(_text("a")),
            _image(),
            _paragraph(_text("b")),
        ]

    def test_trailing_image_leaves_empty_paragraph(self):
        result = hoist_images(_doc(_paragraph(_text("a"), _image())))
        assert result["content"] == [_paragraph(_text("a")), _image(), _paragraph()]

    def test_leading_image_has_no_empty_paragraph_before_it(self):
        result = hoist_images(_doc(_paragraph(_image(), _text("b"))))
        assert result["content"] == [_image(), _paragraph(_text("b"))]

    def test_paragraph_without_images_is_kept(self):
        doc = _doc(_paragraph(_text("a")), {"type": "heading", "content": [_text("h")]})
        assert hoist_images(doc) == doc

    def test_does_not_mutate_input(self):
        doc = _doc(_paragraph(_text("a"), _image(), _text("b")))
        original = copy.deepcopy(doc)
        hoist_images(doc)
        assert doc == original

    def test_not_recursive(self):
        nested = {"type": "blockquote", "content": [_paragraph(_text("a"), _image())]}
        doc = _doc(nested)
        assert hoist_images(doc) == doc


class TestInlineComponents:
    def test_merges_inline_block_and_following_paragraph(self):
        doc = _doc(_paragraph(_text("A")), _blok("inline_badge"), _paragraph(_text("B")))
        result = inline_components(doc)
        assert result["content"] == [
            _paragraph(_text("A"), _blok("inline_badge"), _text("B")),
        ]

    def test_bare_block_child_matches(self):
        badge = {"component": "InlineBadge", "_uid": "x"}
        doc = _doc(_paragraph(_text("A")), badge)
        assert inline_components(doc)["content"] == [_paragraph(_text("A"), badge)]

    def test_non_matching_component_is_kept(self):
        doc = _doc(_paragraph(_text("A")), _blok("gallery"), _paragraph(_text("B")))
        assert inline_components(doc) == doc

    def test_block_without_preceding_paragraph_is_kept(self):
        doc = _doc(_blok("inline_badge"), _paragraph(_text("B")))
        assert inline_components(doc) == doc

    def test_disabled(self):
        doc = _doc(_paragraph(_text("A")), _blok("inline_badge"))
        assert inline_components(doc, False) is doc

    def test_custom_pattern(self):
        doc = _doc(_paragraph(_text("A")), _blok("badge"), _paragraph(_text("B")))
        result = inline_components(doc, re.compile("^badge$"))
        assert len(result["content"]) == 1

    def test_string_pattern(self):
        doc = _doc(_paragraph(_text("A")), _blok("footnote"))
        result = inline_components(doc, "foot")
        assert result["content"] == [_paragraph(_text("A"), _blok("footnote"))]

    def test_recurses_into_bullet_list_items(self):
        item = {
            "type": "list_item",
            "content": [_paragraph(_text("A")), _blok("inline_x"), _paragraph(_text("B"))],
        }
        doc = _doc({"type": "bullet_list", "content": [item]})
        result = inline_components(doc)
        merged = result["content"][0]["content"][0]["content"]
        assert merged == [_paragraph(_text("A"), _blok("inline_x"), _text("B"))]

    def test_does_not_recurse_into_other_containers(self):
        quote = {
            "type": "blockquote",
            "content": [_paragraph(_text("A")), _blok("inline_x")],
        }
        doc = _doc(quote)
        assert inline_components(doc) == doc


class TestPrepareRichtext:
    def test_hoist_then_inline(self):
        doc = _doc(_paragraph(_text("A"), _image()), _blok("inline_x"), _paragraph(_text("B")))
        options = RichTextOptions(hoist_images=True, inline_components=True)
        result = prepare_richtext(doc, options)
        assert result["content"] == [
            _paragraph(_text("A")),
            _image(),
            _paragraph(_blok("inline_x"), _text("B")),
        ]

    def test_custom_transform_runs_last(self):
        options = RichTextOptions(transform=lambda d: {**d, "marked": True})
        assert prepare_richtext(_doc(), options)["marked"] is True

    def test_prepare_fields_replaces_nested_documents(self):
        tree = {
            "component": "page",
            "_uid": "1",
            "body": [{"component": "text", "_uid": "2", "text": _doc(_paragraph(_image()))}],
        }
        prepare_richtext_fields(tree, RichTextOptions(hoist_images=True))
        assert tree["body"][0]["text"]["content"] == [_image(), _paragraph()]
