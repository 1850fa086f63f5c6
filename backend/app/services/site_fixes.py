"""Per-site DOM corrections applied to the page before extraction.

Some publishers ship markup the generic extractor cannot read: images that
only exist in ``data-src`` or in Open Graph tags, or content that stays hidden
until a script runs. Each known host maps to an ordered tuple of fix-up steps;
supporting a new host means adding an entry, not a branch.
"""

import logging
from typing import Callable

from app.services.document import HtmlDocument

logger = logging.getLogger(__name__)

OG_IMAGE_SELECTOR = 'meta[property="og:image"], meta[name="og:image"]'

SiteFix = Callable[[HtmlDocument], None]
ContentOverride = Callable[[HtmlDocument], "str | None"]


def fix_lazy_images(doc: HtmlDocument) -> None:
    """Copy ``data-src`` into ``src`` for lazy-loaded images.

    The extractor only looks at ``src``, so this has to run first.
    """
    # sample page: https://mp.weixin.qq.com/s/U07oNCwtiAMGnBvYZXPuMg
    fixed = 0
    for img in doc.select("body img:not([src])[data-src]"):
        img["src"] = img["data-src"]
        fixed += 1
    if fixed:
        logger.debug(f"Copied data-src into src for {fixed} lazy image(s)")


def fix_xiaohongshu_images(doc: HtmlDocument) -> None:
    """Surface note images that only exist as og:image meta tags."""
    # sample page: https://www.xiaohongshu.com/explore/66a589ef000000002701c69e
    target = doc.select_one("#detail-desc") or doc.body
    if target is None:
        return
    container = doc.new_tag("span")
    target.insert(0, container)
    for meta in doc.select(OG_IMAGE_SELECTOR):
        paragraph = doc.new_tag("p")
        paragraph.append(doc.new_tag("img", src=meta.get("content", "")))
        container.append(paragraph)


def fix_weixin_article(doc: HtmlDocument) -> None:
    """Un-hide the article body, which is rendered with visibility: hidden."""
    # sample page: https://mp.weixin.qq.com/s/ayHC7MpG6Jpiogzp-opQFw
    content = doc.select_one("#js_content, .rich_media_content")
    if content is not None:
        content["style"] = ""


def telegraph_article(doc: HtmlDocument) -> str | None:
    """Use telegra.ph's own article container instead of the extractor's pick.

    The title and author line are hidden rather than removed, mirroring the
    site's stylesheet (https://telegra.ph/css/core.min.css).
    """
    article = doc.select_one(".tl_article_content")
    if article is None:
        return None
    for selector in ("h1", "address"):
        el = article.find(selector)
        if el is not None:
            el["style"] = "display: none"
    return article.decode_contents(formatter="html5")


# Host -> fix-ups run in order after the universal lazy-image fix.
SITE_FIXES: dict[str, tuple[SiteFix, ...]] = {
    "www.xiaohongshu.com": (fix_xiaohongshu_images,),
    "mp.weixin.qq.com": (fix_weixin_article,),
}

# Host -> function returning the article HTML to publish instead of the
# extractor's content (None when the page does not have the expected shape).
CONTENT_OVERRIDES: dict[str, ContentOverride] = {
    "telegra.ph": telegraph_article,
}


def apply_site_fixes(doc: HtmlDocument, hostname: str) -> None:
    """Run the universal lazy-image fix, then the host's own fix-ups."""
    fix_lazy_images(doc)
    for fix in SITE_FIXES.get(hostname, ()):
        logger.debug(f"Applying {fix.__name__} for {hostname}")
        fix(doc)


def override_content(doc: HtmlDocument, hostname: str) -> str | None:
    """Article HTML chosen by a host-specific rule, or None."""
    override = CONTENT_OVERRIDES.get(hostname)
    if override is None:
        return None
    content = override(doc)
    if content is None:
        logger.info(f"No override container found on {hostname}; using extracted content")
    return content
