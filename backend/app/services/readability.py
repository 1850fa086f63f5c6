"""Article extraction: readability-lxml for the body, meta tags for the rest.

readability-lxml only scores and returns the main content, so the byline,
excerpt, site name and publication time are probed from the page's metadata
the same way Mozilla's Readability does (Open Graph, Dublin Core, ``author``
meta tags, then visible byline markup).
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Protocol

from bs4 import BeautifulSoup
from readability import Document
from readability.readability import Unparseable

from app.core.exceptions import ExtractionError
from app.services.document import HtmlDocument
from app.services.site_fixes import override_content
from app.services.urls import hostname_of

logger = logging.getLogger(__name__)

# Bylines longer than this are almost always a bio paragraph, not a name
MAX_BYLINE_CHARS = 100

NO_TITLE_PLACEHOLDER = "[no-title]"

_TITLE_META = [("property", "og:title"), ("name", "twitter:title"), ("name", "dc.title")]
_BYLINE_META = [
    ("name", "author"),
    ("name", "dc.creator"),
    ("name", "parsely-author"),
    ("property", "article:author"),
]
_EXCERPT_META = [
    ("property", "og:description"),
    ("name", "description"),
    ("name", "twitter:description"),
    ("name", "dc.description"),
]
_SITE_NAME_META = [("property", "og:site_name")]
_PUBLISHED_META = [
    ("property", "article:published_time"),
    ("name", "parsely-pub-date"),
    ("itemprop", "datePublished"),
]
_BYLINE_SELECTORS = ["[rel='author']", "[itemprop='author']", ".byline", ".author"]


@dataclass
class ExtractedArticle:
    title: str | None = None
    byline: str | None = None
    excerpt: str | None = None
    site_name: str | None = None
    content: str | None = None
    published_time: str | None = None
    length: int = 0


class ArticleExtractor(Protocol):
    def parse(self, document: HtmlDocument) -> ExtractedArticle | None:
        """Return the article found in ``document``, or None if there is none."""
        ...


def _meta_content(soup: BeautifulSoup, keys: list[tuple[str, str]]) -> str | None:
    for attr, value in keys:
        tag = soup.find("meta", attrs={attr: value})
        if tag is None:
            continue
        content = (tag.get("content") or "").strip()
        if content:
            return content
    return None


def _find_byline(soup: BeautifulSoup) -> str | None:
    byline = _meta_content(soup, _BYLINE_META)
    # article:author is frequently a profile URL rather than a name
    if byline and not byline.startswith(("http://", "https://")):
        return byline
    for selector in _BYLINE_SELECTORS:
        el = soup.select_one(selector)
        if el is None:
            continue
        text = el.get_text(" ", strip=True)
        if text and len(text) <= MAX_BYLINE_CHARS:
            return text
    return None


def _first_paragraph(content_soup: BeautifulSoup) -> str | None:
    for p in content_soup.find_all("p"):
        text = p.get_text(" ", strip=True)
        if text:
            return text
    return None


def _document_title(reader: Document) -> str | None:
    # readability-lxml answers "[no-title]" for pages without a <title>
    for candidate in (reader.short_title(), reader.title()):
        candidate = (candidate or "").strip()
        if candidate and candidate != NO_TITLE_PLACEHOLDER:
            return candidate
    return None


class ReadabilityExtractor:
    """ArticleExtractor backed by readability-lxml."""

    def parse(self, document: HtmlDocument) -> ExtractedArticle | None:
        # No url=: readability would absolutize links itself and drop any it
        # cannot parse; the figure transform resolves them instead
        reader = Document(document.to_html())
        try:
            content = reader.summary(html_partial=True)
        except Unparseable as e:
            logger.warning(f"readability could not parse {document.base_url}: {e}")
            return None

        content_soup = BeautifulSoup(content or "", "lxml")
        text = content_soup.get_text(" ", strip=True)
        if not text and content_soup.find("img") is None:
            content = None

        soup = document.soup
        title = _meta_content(soup, _TITLE_META) or _document_title(reader)
        return ExtractedArticle(
            title=title or None,
            byline=_find_byline(soup),
            excerpt=_meta_content(soup, _EXCERPT_META) or _first_paragraph(content_soup),
            site_name=_meta_content(soup, _SITE_NAME_META),
            content=content,
            published_time=_meta_content(soup, _PUBLISHED_META),
            length=len(text),
        )


def extract_article(
    document: HtmlDocument, extractor: ArticleExtractor | None = None
) -> ExtractedArticle:
    """Extract the article, honouring per-host content overrides.

    The override and the generic extraction always both run: the override
    only replaces ``content``, every other field comes from the extractor.

    Raises:
        ExtractionError: the extractor found nothing, or found no content and
            no override applies.
    """
    url = document.base_url
    override = override_content(document, hostname_of(url))

    extractor = extractor or ReadabilityExtractor()
    article = extractor.parse(document)
    if article is None:
        raise ExtractionError(f"Failed to extract readable content from {url}")

    if override is not None:
        return dataclasses.replace(article, content=override)
    if not article.content:
        raise ExtractionError(f"No readable content found at {url}")
    return article
