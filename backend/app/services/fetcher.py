"""Upstream page fetch."""

import logging
import time
from dataclasses import dataclass

import httpx

from app.config import settings
from app.core.exceptions import UpstreamFetchError
from app.core.metrics import upstream_fetch_duration_seconds

logger = logging.getLogger(__name__)

# User agents of HTTP libraries rather than browsers; the fallback UA is sent
# instead so publishers serve the regular page
_LIBRARY_USER_AGENTS = ("node-fetch", "python-httpx", "python-requests", "curl/")

# Upstream error bodies are echoed to users, keep them short
MAX_ERROR_BODY_CHARS = 500


@dataclass
class UpstreamPage:
    url: str
    content: bytes
    status_code: int
    encoding: str | None = None
    cache_control: str | None = None


def build_upstream_headers(user_agent: str | None) -> dict[str, str]:
    """Headers for the upstream request, derived from the client's user agent."""
    if user_agent and not any(lib in user_agent for lib in _LIBRARY_USER_AGENTS):
        ua = f"{user_agent} {settings.DEFAULT_USER_AGENT_SUFFIX}"
    else:
        ua = settings.FALLBACK_USER_AGENT
    return {
        "user-agent": ua,
        "referer": settings.UPSTREAM_REFERER,
    }


async def fetch_page(url: str, headers: dict[str, str]) -> UpstreamPage:
    """GET ``url`` and return the raw page.

    Raises:
        UpstreamFetchError: on network errors and non-2xx responses.
    """
    start = time.perf_counter()
    try:
        async with httpx.AsyncClient(
            follow_redirects=True, timeout=settings.UPSTREAM_TIMEOUT
        ) as client:
            response = await client.get(url, headers=headers)
    except httpx.HTTPError as e:
        logger.warning(f"Upstream fetch of {url} failed: {e!r}")
        raise UpstreamFetchError(f"Upstream fetch failed: {e!r}") from e
    finally:
        upstream_fetch_duration_seconds.observe(time.perf_counter() - start)

    logger.debug(f"Upstream {url} -> {response.status_code} ({len(response.content)} bytes)")
    if not response.is_success:
        body = response.text[:MAX_ERROR_BODY_CHARS]
        raise UpstreamFetchError(
            f"Upstream HTTP Error: {response.status_code} {response.reason_phrase}\n{body}",
            upstream_status=response.status_code,
            body=body,
        )

    return UpstreamPage(
        url=str(response.url),
        content=response.content,
        status_code=response.status_code,
        encoding=response.charset_encoding,
        cache_control=response.headers.get("cache-control"),
    )
