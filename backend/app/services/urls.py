"""URL helpers: reference resolution and request URL validation."""

import logging
import re
from urllib.parse import urljoin, urlparse

from bs4 import Tag

logger = logging.getLogger(__name__)

# "scheme:" prefix per RFC 3986 (http:, https:, data:, blob:, ...)
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_WHITESPACE_RE = re.compile(r"\s")

# Browsers trim C0 controls and spaces around a URL and drop tabs/newlines in it
_C0_AND_SPACE = "".join(chr(i) for i in range(0x21))
_TAB_OR_NEWLINE_RE = re.compile(r"[\t\n\r]")


def normalize_reference(reference: str) -> str:
    """The reference as a browser would read it from an attribute value."""
    return _TAB_OR_NEWLINE_RE.sub("", reference.strip(_C0_AND_SPACE))


def url_scheme(reference: str) -> str | None:
    """Lower-cased scheme of ``reference``, or None for relative references."""
    match = _SCHEME_RE.match(normalize_reference(reference))
    return match.group(0)[:-1].lower() if match else None


def resolve_url(reference: str, base: str) -> str:
    """Resolve ``reference`` against ``base``.

    References that already carry a scheme are returned trimmed but otherwise
    unchanged. Anything that fails to parse is returned exactly as given:
    resolution is best-effort and never raises.
    """
    normalized = normalize_reference(reference)
    if url_scheme(normalized):
        return normalized
    try:
        return urljoin(base, normalized)
    except ValueError as e:
        logger.debug(f"Leaving unresolvable reference {reference!r} as-is: {e}")
        return reference


def resolve_img_src(img: Tag, base: str) -> None:
    """Make an <img>'s address absolute in-place (``src``, else ``data-src``)."""
    src = img.get("src") or img.get("data-src") or ""
    if not src:
        return
    img["src"] = resolve_url(src, base)


def is_valid_url(url: str | None) -> bool:
    """True when ``url`` parses as an absolute URL (scheme and host)."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    host = parsed.hostname
    return bool(parsed.scheme and host and not _WHITESPACE_RE.search(host))


def fix_url(text: str) -> str | None:
    """Turn loosely typed user input ("example.com/a") into a URL, or None."""
    url = text.strip()
    if not url.startswith("http"):
        url = f"http://{url}"
    return url if is_valid_url(url) else None


def hostname_of(url: str) -> str:
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""
