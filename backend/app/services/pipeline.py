"""Request-scoped content pipeline: fetch, fix up, extract, transform, sanitize.

Each call owns its documents outright: the page document lives until the
metadata has been read from it, then a fresh fragment document is built from
the article HTML for the figure transform and the sanitizer. Nothing is cached
or shared between requests apart from the static per-site tables.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from app.core.exceptions import InvalidURLError
from app.core.metrics import pipeline_duration_seconds
from app.schemas.article import ArticleMetadata
from app.services.document import HtmlDocument
from app.services.fetcher import build_upstream_headers, fetch_page
from app.services.figures import transform_image_paragraphs
from app.services.metadata import (
    extract_dir,
    extract_image_url,
    extract_lang,
    strip_repeated_whitespace,
)
from app.services.readability import ArticleExtractor, extract_article
from app.services.sanitizer import HtmlSanitizer, Nh3Sanitizer
from app.services.site_fixes import apply_site_fixes
from app.services.urls import hostname_of, is_valid_url

logger = logging.getLogger(__name__)


@dataclass
class ReadabilityResult:
    article: ArticleMetadata
    cache_control: str | None = None


def clean_content(
    html: str, base_url: str, sanitizer: HtmlSanitizer | None = None
) -> str:
    """Figure-transform and sanitize an article fragment.

    Both steps run on the same fragment document, in that order.
    """
    fragment = HtmlDocument.parse(html, base_url)
    transform_image_paragraphs(fragment)
    return (sanitizer or Nh3Sanitizer()).sanitize(fragment)


def build_article(
    html: str | bytes,
    url: str,
    encoding: str | None = None,
    extractor: ArticleExtractor | None = None,
    sanitizer: HtmlSanitizer | None = None,
) -> ArticleMetadata:
    """Run the synchronous part of the pipeline over an already fetched page."""
    start = time.perf_counter()

    page = HtmlDocument.parse(html, url, encoding)
    apply_site_fixes(page, hostname_of(url))
    extracted = extract_article(page, extractor)

    fields = {
        "url": url,
        "lang": extract_lang(page),
        "dir": extract_dir(page),
        "title": extracted.title,
        "byline": strip_repeated_whitespace(extracted.byline),
        "site_name": strip_repeated_whitespace(extracted.site_name),
        "excerpt": strip_repeated_whitespace(extracted.excerpt),
        "image_url": extract_image_url(page),
        "published_time": extracted.published_time,
        "length": extracted.length,
    }
    del page

    fields["content"] = clean_content(extracted.content or "", url, sanitizer)
    article = ArticleMetadata(**fields)

    elapsed = time.perf_counter() - start
    pipeline_duration_seconds.observe(elapsed)
    logger.info(
        f"Extracted {url}: title={article.title!r} "
        f"content={len(article.content)} chars in {elapsed:.3f}s"
    )
    return article


async def readability(url: str | None, user_agent: str | None = None) -> ReadabilityResult:
    """Fetch ``url`` and return its cleaned article.

    Raises:
        InvalidURLError: ``url`` is not an absolute URL; nothing is fetched.
        UpstreamFetchError: the fetch failed or returned a non-2xx status.
        ExtractionError: no readable content was found.
        SanitizationError: the sanitizer rejected the content.
    """
    if not is_valid_url(url):
        raise InvalidURLError("Invalid URL")

    page = await fetch_page(url, build_upstream_headers(user_agent))
    # DOM work is CPU-bound; keep it off the event loop (to_thread keeps the
    # request-id context for logging)
    article = await asyncio.to_thread(build_article, page.content, url, page.encoding)
    return ReadabilityResult(article=article, cache_control=page.cache_control)
