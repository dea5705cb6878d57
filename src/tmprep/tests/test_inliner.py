"""Tests for the CSS inliner adapter."""

import logging

import pytest
from bs4 import BeautifulSoup

from tmprep import inliner
from tmprep.errors import InlineError
from tmprep.inliner import inline, inline_css

DOC = (
    "<html><head><title>t</title></head>"
    '<body><p class="x">Hi</p></body></html>'
)


def style_of(html: str, tag: str) -> str:
    node = BeautifulSoup(html, "html.parser").find(tag)
    return (node.get("style") or "").replace(" ", "")


def test_extra_css_inlined():
    out = inline_css(DOC, ".x { color: red; }")
    assert "color:red" in style_of(out, "p")


def test_style_tags_kept():
    doc = DOC.replace("</head>", "<style>.x { font-weight: bold; }</style></head>")
    out = inline_css(doc)
    assert "<style" in out
    assert "font-weight:bold" in style_of(out, "p")


def test_media_queries_not_inlined():
    css = ".x { color: red; } @media only screen and (max-width: 600px) { .x { color: blue; } }"
    out = inline_css(DOC, css)
    assert "@media" in out
    assert "blue" not in style_of(out, "p")


def test_font_face_preserved():
    css = "@font-face { font-family: Brand; src: url(brand.woff); } .x { color: red; }"
    out = inline_css(DOC, css)
    assert "@font-face" in out


def test_placeholder_comments_survive():
    doc = DOC.replace("Hi", "Hi <!--VAR:e3sgdXNlci5uYW1lIH19-->")
    out = inline_css(doc, ".x { color: red; }")
    assert "<!--VAR:e3sgdXNlci5uYW1lIH19-->" in out


class TestFailure:
    @pytest.fixture
    def broken_premailer(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(inliner, "Premailer", boom)

    def test_inline_css_raises(self, broken_premailer):
        with pytest.raises(InlineError):
            inline_css(DOC, "")

    def test_inline_passes_through(self, broken_premailer, caplog):
        with caplog.at_level(logging.WARNING, logger="tmprep"):
            assert inline(DOC, ".x { color: red; }") == DOC
        assert "CSS inlining failed" in caplog.text
