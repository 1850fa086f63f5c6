"""Parsed HTML documents bound to the URL they were fetched from."""

from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag


@dataclass
class HtmlDocument:
    """A mutable DOM tree plus the base URL used for relative references.

    A request builds two of these: the *page* document (full upstream page,
    mutated by the site fixes, read by extraction) and the *fragment* document
    (the extracted article, transformed and then sanitized). Neither is shared
    with another request or reused after its stage returns.
    """

    soup: BeautifulSoup
    base_url: str

    @classmethod
    def parse(
        cls, html: str | bytes, base_url: str, encoding: str | None = None
    ) -> "HtmlDocument":
        """Parse ``html``; raw bytes are decoded using ``encoding`` or <meta charset>."""
        if isinstance(html, bytes):
            soup = BeautifulSoup(html, "lxml", from_encoding=encoding)
        else:
            soup = BeautifulSoup(html or "", "lxml")
        return cls(soup=soup, base_url=base_url)

    @property
    def root(self) -> Tag | None:
        return self.soup.find("html")

    @property
    def head(self) -> Tag | None:
        return self.soup.find("head")

    @property
    def body(self) -> Tag | None:
        return self.soup.find("body")

    def select_one(self, selector: str) -> Tag | None:
        return self.soup.select_one(selector)

    def select(self, selector: str) -> list[Tag]:
        return self.soup.select(selector)

    def new_tag(self, name: str, **attrs) -> Tag:
        return self.soup.new_tag(name, attrs=attrs)

    def inner_html(self) -> str:
        """Serialize the body's children, or the root's when there is no body."""
        container = self.body or self.root or self.soup
        return container.decode_contents(formatter="html5")

    def to_html(self) -> str:
        return self.soup.decode(formatter="html5")
