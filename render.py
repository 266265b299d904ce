#!/usr/bin/env python3
"""Markdown to HTML fragment rendering, via markdown-it in commonmark mode."""
from __future__ import annotations

from markdown_it import MarkdownIt
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.footnote import footnote_plugin
from pygments import highlight
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound
from pygments.formatters import HtmlFormatter

from page_options import get_logger

LOGGER = get_logger(__name__)

formatter = HtmlFormatter(cssclass="codehilite", nowrap=False)


def pygments_highlight(code: str, lang: str, attrs: dict) -> str:
    """Highlight code using Pygments; fallback to plain text."""
    if not lang:
        lexer = TextLexer(stripall=True)
    else:
        try:
            lexer = get_lexer_by_name(lang, stripall=True)
        except ClassNotFound:
            lexer = TextLexer(stripall=True)
    return highlight(code, lexer, formatter)


def make_parser(extended: bool = False) -> MarkdownIt:
    """
    Build the parser. The commonmark preset passes raw html through
    untouched. Extended mode adds footnotes, heading anchors, smart
    quotes and Pygments highlighting of fenced code.
    """
    if not extended:
        return MarkdownIt("commonmark", {"html": True})
    md = MarkdownIt("commonmark", {"html": True, "highlight": pygments_highlight, "typographer": True})
    md.enable(["replacements", "smartquotes"])
    md.use(footnote_plugin)
    md.use(anchors_plugin, min_level=1, max_level=3, permalink=False)
    return md


def render_markdown(md_text: str, extended: bool = False) -> str:
    LOGGER.debug("Parsing markdown (%s mode)", "extended" if extended else "commonmark")
    html = make_parser(extended).render(md_text)
    LOGGER.debug("Rendered %d chars of HTML", len(html))
    return html
