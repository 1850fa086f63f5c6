"""Sanitization of the transformed article fragment.

The sanitizer reads its markup straight from the fragment document the
figure transform just mutated, so the tree that was transformed is exactly the
tree that gets cleaned.
"""

import logging
from typing import Protocol

import nh3

from app.core.exceptions import SanitizationError
from app.services.document import HtmlDocument
from app.services.urls import normalize_reference, url_scheme

logger = logging.getLogger(__name__)

# ammonia's defaults already allow these; listed so the figure transform's
# output can never be silently dropped by a policy change upstream
FIGURE_TAGS = {"figure", "figcaption"}

# style: hidden title/author blocks on overridden pages stay hidden
# lang/dir: keep language metadata on quoted passages
GENERIC_ATTRIBUTES = {"style", "lang", "dir", "title"}

# Attributes ammonia checks against its URL scheme list
URL_ATTRIBUTES = {"href", "src", "cite", "longdesc", "action", "formaction", "poster", "background"}


class HtmlSanitizer(Protocol):
    def sanitize(self, fragment: HtmlDocument) -> str:
        """Return the fragment's markup with unsafe content removed."""
        ...


class Nh3Sanitizer:
    """HtmlSanitizer backed by nh3 (ammonia) with its default safe policy.

    Inline ``data:`` images are kept on ``<img src>``; ``data:`` URLs are
    dropped everywhere else.
    """

    def __init__(self) -> None:
        self.tags = set(nh3.ALLOWED_TAGS) | FIGURE_TAGS
        self.attributes = {tag: set(attrs) for tag, attrs in nh3.ALLOWED_ATTRIBUTES.items()}
        self.attributes["*"] = self.attributes.get("*", set()) | GENERIC_ATTRIBUTES
        self.url_schemes = set(nh3.ALLOWED_URL_SCHEMES) | {"data"}

    @staticmethod
    def _filter_attribute(tag: str, attr: str, value: str) -> str | None:
        if attr not in URL_ATTRIBUTES or url_scheme(value) != "data":
            return value
        if tag == "img" and attr == "src" and normalize_reference(value)[5:11].lower() == "image/":
            return value
        return None

    def sanitize(self, fragment: HtmlDocument) -> str:
        markup = fragment.inner_html()
        try:
            return nh3.clean(
                markup,
                tags=self.tags,
                attributes=self.attributes,
                url_schemes=self.url_schemes,
                attribute_filter=self._filter_attribute,
            )
        except (TypeError, ValueError) as e:
            raise SanitizationError(f"Failed to sanitize article content: {e}") from e
