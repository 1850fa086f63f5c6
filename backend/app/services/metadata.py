"""Page-level metadata derived after extraction."""

import re

from app.services.document import HtmlDocument

_WHITESPACE_RUN_RE = re.compile(r"\s+")


def strip_repeated_whitespace(value: str | None) -> str | None:
    """Collapse every whitespace run to one space; None/"" pass through."""
    if not value:
        return value
    return _WHITESPACE_RUN_RE.sub(" ", value)


def _root_attr(doc: HtmlDocument, name: str) -> str | None:
    # Malformed pages may lack <html> or <body> entirely
    for el in (doc.root, doc.body):
        if el is None:
            continue
        value = el.get(name)
        if value is not None:
            return value
    return None


def extract_lang(doc: HtmlDocument) -> str | None:
    """``lang`` of <html>, falling back to <body>; None if neither has one."""
    return _root_attr(doc, "lang")


def extract_dir(doc: HtmlDocument) -> str | None:
    return _root_attr(doc, "dir")


def extract_image_url(doc: HtmlDocument) -> str | None:
    """First non-empty og:image, accepting the non-standard ``name=`` form as a fallback."""
    # some sites (xiaohongshu.com) use name="og:image" instead of property=
    for attr in ("property", "name"):
        for tag in doc.soup.find_all("meta", attrs={attr: "og:image"}):
            content = (tag.get("content") or "").strip()
            if content:
                return content
    return None
