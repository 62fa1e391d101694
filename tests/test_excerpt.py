"""Tests for cmsgraph.services.excerpt."""

from cmsgraph.services.excerpt import char_count, extract, full_sentences

_CONTENT = {
    "component": "page",
    "_uid": "1",
    "headline": "Welcome",
    "description": "A short intro.",
    "hero": {"fieldtype": "asset", "id": 1, "filename": "https://a.example.com/f/1/h.jpg"},
    "body": [
        {
            "component": "text",
            "_uid": "2",
            "richtext": {
                "type": "doc",
                "content": [
                    {"type": "heading", "content": [{"type": "text", "text": "Chapter"}]},
                    {"type": "paragraph", "content": [{"type": "text", "text": "Body copy."}]},
                    {"type": "image", "attrs": {"id": 9, "src": "https://a.example.com/f/1/x.png"}},
                ],
            },
        }
    ],
}


class TestExtract:
    def test_headlines(self):
        assert extract(_CONTENT).headlines == ["Welcome", "Chapter"]

    def test_text(self):
        assert extract(_CONTENT).text == ["A short intro.", "Chapter", "Body copy."]

    def test_images_include_richtext_images_as_assets(self):
        images = extract(_CONTENT).images
        assert [img["filename"] for img in images] == [
            "https://a.example.com/f/1/h.jpg",
            "https://a.example.com/f/1/x.png",
        ]
        assert images[1]["fieldtype"] == "asset"

    def test_char_count(self):
        expected = len("Welcome") + len("Chapter") + len("A short intro.") + len("Chapter") + len("Body copy.")
        assert char_count(_CONTENT) == expected


class TestFullSentences:
    def test_drops_incomplete_trailing_sentence(self):
        assert full_sentences(["One. Two! Three"]) == "One. Two!"

    def test_respects_max_chars(self):
        assert full_sentences(["Short one. A much longer second sentence."], max_chars=15) == "Short one."

    def test_text_without_terminator_is_kept(self):
        assert full_sentences(["No terminator"]) == "No terminator"
