import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from app.config import settings
from app.core.exceptions import ReadabilityError
from app.core.metrics import readability_requests_total
from app.services.pipeline import readability
from app.services.render import LOOP_GUARD_PAGE, render_article

router = APIRouter()
logger = logging.getLogger(__name__)

# Our own fetches carry this in their user agent
SELF_USER_AGENT_MARKER = "readability-bot"


@router.get(
    "",
    summary="Readable version of a web page",
    description="Fetch the page at `url`, extract its main article, and return it either as a "
    "sanitized standalone HTML page (default) or as JSON metadata (`format=json`). "
    "`type` is a deprecated alias of `format`.",
    response_class=HTMLResponse,
    responses={200: {"content": {"application/json": {}}}},
)
async def readable_page(
    request: Request,
    url: str | None = Query(None, description="Absolute URL of the page to extract"),
    fmt: str | None = Query(None, alias="format", description="html (default) or json"),
    legacy_type: str | None = Query(None, alias="type", deprecated=True),
) -> Response:
    user_agent = request.headers.get("user-agent", "")
    if SELF_USER_AGENT_MARKER in user_agent:
        logger.warning(f"Refusing request from our own user agent for {url}")
        return HTMLResponse(LOOP_GUARD_PAGE)

    fmt = fmt or legacy_type
    if not url and fmt != "json":
        return RedirectResponse(settings.APP_URL)

    output = "json" if fmt == "json" else "html"
    try:
        result = await readability(url, user_agent)
    except ReadabilityError as e:
        logger.warning(f"Readability request for {url} failed: {e.code}: {e.message}")
        readability_requests_total.labels(format=output, status=e.code).inc()
        raise
    readability_requests_total.labels(format=output, status="ok").inc()

    headers = {"cache-control": result.cache_control or settings.DEFAULT_CACHE_CONTROL}
    if output == "json":
        return JSONResponse(result.article.to_json(), headers=headers)
    return HTMLResponse(render_article(result.article), headers=headers)
