"""Integration tests for GET /v1/readability."""
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from app.config import settings
from app.core.exceptions import ExtractionError, UpstreamFetchError
from app.schemas.article import ArticleMetadata
from app.services.pipeline import ReadabilityResult

ARTICLE = ArticleMetadata(
    url="https://example.com/post",
    lang="en",
    title="Hello <World>",
    byline="Jane Doe",
    site_name="Example",
    excerpt="An excerpt",
    content="<p>Body text</p>",
    image_url="https://example.com/cover.jpg",
    published_time="2024-01-01T00:00:00Z",
    length=9,
)


def _patch_pipeline(**kwargs):
    return patch("app.api.v1.readability.readability", new=AsyncMock(**kwargs))


class TestReadableJson:
    @pytest.mark.asyncio
    async def test_json_output(self, client: AsyncClient):
        with _patch_pipeline(return_value=ReadabilityResult(ARTICLE)) as pipeline:
            resp = await client.get(
                "/v1/readability",
                params={"url": "https://example.com/post", "format": "json"},
                headers={"user-agent": "Mozilla/5.0"},
            )
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Hello <World>"
        assert data["siteName"] == "Example"
        assert data["imageUrl"] == "https://example.com/cover.jpg"
        assert data["publishedTime"] == "2024-01-01T00:00:00Z"
        assert data["dir"] is None
        assert resp.headers["cache-control"] == settings.DEFAULT_CACHE_CONTROL
        pipeline.assert_awaited_once_with("https://example.com/post", "Mozilla/5.0")

    @pytest.mark.asyncio
    async def test_legacy_type_param(self, client: AsyncClient):
        with _patch_pipeline(return_value=ReadabilityResult(ARTICLE)):
            resp = await client.get(
                "/v1/readability", params={"url": "https://example.com/post", "type": "json"}
            )
        assert resp.headers["content-type"].startswith("application/json")

    @pytest.mark.asyncio
    async def test_upstream_cache_control_forwarded(self, client: AsyncClient):
        result = ReadabilityResult(ARTICLE, cache_control="max-age=60")
        with _patch_pipeline(return_value=result):
            resp = await client.get(
                "/v1/readability", params={"url": "https://example.com/post", "format": "json"}
            )
        assert resp.headers["cache-control"] == "max-age=60"


class TestReadableHtml:
    @pytest.mark.asyncio
    async def test_html_output(self, client: AsyncClient):
        with _patch_pipeline(return_value=ReadabilityResult(ARTICLE)):
            resp = await client.get("/v1/readability", params={"url": "https://example.com/post"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "<p>Body text</p>" in resp.text
        assert "Hello &lt;World&gt;" in resp.text
        assert "script-src 'none'" in resp.text

    @pytest.mark.asyncio
    async def test_missing_url_redirects_home(self, client: AsyncClient):
        resp = await client.get("/v1/readability")
        assert resp.status_code == 307
        assert resp.headers["location"] == settings.APP_URL

    @pytest.mark.asyncio
    async def test_own_user_agent_gets_guard_page(self, client: AsyncClient):
        with _patch_pipeline() as pipeline:
            resp = await client.get(
                "/v1/readability",
                params={"url": "https://example.com/post"},
                headers={"user-agent": "Mozilla/5.0 readability-bot/0.1"},
            )
        assert resp.status_code == 200
        assert "Catastrophic Server Error" in resp.text
        pipeline.assert_not_called()


class TestReadableErrors:
    @pytest.mark.asyncio
    async def test_invalid_url(self, client: AsyncClient):
        resp = await client.get("/v1/readability", params={"url": "example", "format": "json"})
        assert resp.status_code == 400
        assert resp.text == "Invalid URL"

    @pytest.mark.asyncio
    async def test_missing_url_json(self, client: AsyncClient):
        resp = await client.get("/v1/readability", params={"format": "json"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_upstream_error_is_plain_text(self, client: AsyncClient):
        err = UpstreamFetchError("Upstream HTTP Error: 404 Not Found\ngone", upstream_status=404)
        with _patch_pipeline(side_effect=err):
            resp = await client.get("/v1/readability", params={"url": "https://example.com/x"})
        assert resp.status_code == 502
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.text == "Upstream HTTP Error: 404 Not Found\ngone"

    @pytest.mark.asyncio
    async def test_extraction_error(self, client: AsyncClient):
        with _patch_pipeline(side_effect=ExtractionError("No readable content found")):
            resp = await client.get(
                "/v1/readability", params={"url": "https://example.com/x", "format": "json"}
            )
        assert resp.status_code == 422
        assert resp.text == "No readable content found"
