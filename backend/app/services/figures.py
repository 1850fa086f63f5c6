"""Turn image-only paragraphs into <figure> elements.

Extracted articles often wrap each picture in its own ``<p>``. Those
paragraphs become ``<figure><img>[<figcaption>]</figure>`` so the published
page can style them as figures, with the alt text promoted to a caption when it
reads like one. Every image address and link in the fragment is made absolute
on the way.
"""

import logging
import re

from bs4 import Comment, NavigableString, Tag

from app.services.document import HtmlDocument
from app.services.urls import resolve_img_src, resolve_url

logger = logging.getLogger(__name__)

# Alt texts that are really file names (IMG_1234.JPG, 12345.jpg, photo-01.png)
_FILENAME_PATTERNS = [
    re.compile(r"^[\w\-. ]+\.(jpe?g|png|gif|webp|svg|bmp)$", re.IGNORECASE),
    re.compile(r"^IMG[_-]?\d+", re.IGNORECASE),
    re.compile(r"^\d{3,}_\d+"),
]
_NO_LETTERS_RE = re.compile(r"^[^a-zA-Z]*$")
_WHITESPACE_RE = re.compile(r"\s")


def looks_like_filename(alt: str | None) -> bool:
    """True when ``alt`` is empty or looks like a file name, not a caption."""
    if not alt:
        return True
    text = alt.strip()
    if any(pattern.search(text) for pattern in _FILENAME_PATTERNS):
        return True
    # single token with no letters at all: "0423", "__", "2024-01-01"
    return not _WHITESPACE_RE.search(text) and bool(_NO_LETTERS_RE.match(text))


def _meaningful_children(paragraph: Tag) -> list:
    children = []
    for node in paragraph.children:
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            if node.strip():
                children.append(node)
            continue
        children.append(node)
    return children


def _sole_image(paragraph: Tag) -> Tag | None:
    children = _meaningful_children(paragraph)
    if len(children) != 1:
        return None
    child = children[0]
    if isinstance(child, Tag) and child.name == "img":
        return child
    return None


def _build_figure(fragment: HtmlDocument, img: Tag) -> Tag:
    figure = fragment.new_tag("figure")
    figure.append(img.extract())
    alt = img.get("alt") or ""
    if alt.strip() and not looks_like_filename(alt):
        caption = fragment.new_tag("figcaption")
        caption.string = alt.strip()
        figure.append(caption)
    return figure


def transform_image_paragraphs(fragment: HtmlDocument) -> str:
    """Rewrite image-only paragraphs as figures and absolutize image URLs.

    Mutates ``fragment`` in place and returns its body markup, not yet
    sanitized.
    """
    base = fragment.base_url
    figures = 0
    for paragraph in fragment.soup.find_all("p"):
        img = _sole_image(paragraph)
        if img is None:
            for nested in paragraph.find_all("img"):
                resolve_img_src(nested, base)
            continue
        resolve_img_src(img, base)
        paragraph.replace_with(_build_figure(fragment, img))
        figures += 1

    # Images outside paragraphs (and any the loop above skipped)
    for img in fragment.soup.find_all("img"):
        resolve_img_src(img, base)
    for link in fragment.soup.find_all("a", href=True):
        if not link["href"].startswith("#"):
            link["href"] = resolve_url(link["href"], base)

    if figures:
        logger.debug(f"Converted {figures} image paragraph(s) into figures")
    return fragment.inner_html()
