from pydantic import BaseModel, Field


class ArticleMetadata(BaseModel):
    """The bundle published for one page (JSON field names are camelCase)."""

    model_config = {"populate_by_name": True, "frozen": True}

    url: str
    lang: str | None = None
    dir: str | None = None
    title: str | None = None
    byline: str | None = None
    site_name: str | None = Field(default=None, alias="siteName")
    excerpt: str | None = None
    content: str = ""  # sanitized HTML fragment
    image_url: str | None = Field(default=None, alias="imageUrl")
    published_time: str | None = Field(default=None, alias="publishedTime")
    length: int = 0  # characters of article text

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)
