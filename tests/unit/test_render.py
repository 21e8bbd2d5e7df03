"""
Tests for the plain text renderer.
"""

from __future__ import annotations

import pytest

from wiki_opengraph.adapters.render.plain_text import PlainTextRenderer
from wiki_opengraph.components.opengraph import RenderError


@pytest.fixture
def renderer() -> PlainTextRenderer:
    return PlainTextRenderer()


class TestMarkup:
    def test_plain_text_unchanged(self, renderer: PlainTextRenderer) -> None:
        assert renderer.render("Hello world") == "Hello world"

    def test_headings(self, renderer: PlainTextRenderer) -> None:
        assert renderer.render("= Title =\n\nBody") == "Title\n\nBody"
        assert renderer.render("## Section\ntext") == "Section\ntext"

    def test_links(self, renderer: PlainTextRenderer) -> None:
        assert renderer.render("See [[the guide>>Docs.Guide]].") == "See the guide."
        assert renderer.render("See [[Docs.Guide]].") == "See Docs.Guide."

    def test_emphasis(self, renderer: PlainTextRenderer) -> None:
        assert renderer.render("A **bold** and __underlined__ word") == (
            "A bold and underlined word"
        )

    def test_urls_survive(self, renderer: PlainTextRenderer) -> None:
        assert renderer.render("Visit https://example.com/a--b") == (
            "Visit https://example.com/a--b"
        )

    def test_html_tags_stripped(self, renderer: PlainTextRenderer) -> None:
        assert renderer.render("<p>One <em>two</em></p>") == "One two"

    def test_entities_decoded(self, renderer: PlainTextRenderer) -> None:
        assert renderer.render("Fish &amp; chips") == "Fish & chips"

    def test_whitespace_collapsed(self, renderer: PlainTextRenderer) -> None:
        assert renderer.render("  a   b  \n\n\n\n  c ") == "a b\n\nc"

    def test_empty(self, renderer: PlainTextRenderer) -> None:
        assert renderer.render("") == ""


class TestMacros:
    def test_registered_macro_receives_context(self, renderer: PlainTextRenderer) -> None:
        renderer.register_macro("user", lambda context: f"user={context}")
        assert renderer.render("Hi {{user/}}!", "alice") == "Hi user=alice!"

    def test_macro_with_attributes(self) -> None:
        renderer = PlainTextRenderer(macros={"toc": lambda context: "TOC"})
        assert renderer.render('{{toc depth="2"/}}') == "TOC"

    def test_unknown_macro(self, renderer: PlainTextRenderer) -> None:
        with pytest.raises(RenderError, match="Unknown macro"):
            renderer.render("{{missing/}}")

    def test_failing_macro_wrapped(self, renderer: PlainTextRenderer) -> None:
        def broken(context):
            raise KeyError("boom")

        renderer.register_macro("broken", broken)
        with pytest.raises(RenderError, match="broken") as exc_info:
            renderer.render("{{broken/}}")
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_render_error_propagates_unchanged(self, renderer: PlainTextRenderer) -> None:
        original = RenderError("inner")

        def failing(context):
            raise original

        renderer.register_macro("failing", failing)
        with pytest.raises(RenderError) as exc_info:
            renderer.render("{{failing/}}")
        assert exc_info.value is original
