"""HTML parsing for SiteHarvest.

:func:`parse_html` turns a fetched body into a :class:`ParsedDocument` that
answers the two questions the crawler asks of every page:

* links — raw ``href`` values of the ``<a>`` elements, in document order.
* text  — visible text of ``<body>``, whitespace-collapsed.

URL resolution and filtering live in :mod:`site_harvest.crawler.link_extractor`;
this module never looks at the page URL.
"""
from __future__ import annotations

from collections.abc import Sequence

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import NavigableString, Tag

__all__: Sequence[str] = ("ParsedDocument", "ParseError", "parse_html", "collapse_whitespace")

_INVISIBLE_TAGS = ("script", "style", "noscript", "template")


class ParseError(Exception):
    """The body could not be parsed as HTML."""


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to one space and trim the ends."""
    return " ".join(text.split())


class ParsedDocument:
    """Thin query wrapper around a BeautifulSoup tree."""

    __slots__ = ("_soup",)

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    def links(self) -> list[str]:
        hrefs: list[str] = []
        for tag in self._soup.find_all("a", href=True):
            if not isinstance(tag, Tag):
                continue
            href = tag.get("href")
            if isinstance(href, str):
                hrefs.append(href)
        return hrefs

    def text(self) -> str:
        root = self._soup.body or self._soup
        # text() must not mutate the tree, links() may run after it
        parts = [
            str(s) for s in root.find_all(string=True)
            if type(s) is NavigableString  # skips comments, doctype, CDATA
            and not any(p.name in _INVISIBLE_TAGS for p in s.parents)
        ]
        # no separator: inline tags may split a single word
        return collapse_whitespace("".join(parts))


def parse_html(body: str) -> ParsedDocument:
    """Parse *body* with the stdlib-backed ``html.parser`` builder."""
    try:
        soup = BeautifulSoup(body, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ParseError(str(exc)) from exc
    return ParsedDocument(soup)
