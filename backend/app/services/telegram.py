"""Telegram chat relay.

Users send (or inline-query) an article link; the bot asks this service for
the JSON extraction and answers with a title/attribution message that links
to the readable page and its Instant View.
"""

import hashlib
import json
import logging
from html import escape

import httpx

from app.config import construct_iv_url, construct_readable_url, settings
from app.core.metrics import telegram_updates_total
from app.schemas.telegram import InlineQuery, Message, Update
from app.services.urls import fix_url, hostname_of

logger = logging.getLogger(__name__)

START_MESSAGE = """Just send an article link here.
It will be converted to a readable webpage with Instant View."""

# Telegram caches inline answers for this long (seconds)
INLINE_CACHE_TIME = 900


class TelegramError(Exception):
    """The Bot API answered with ok=false or a non-2xx status."""


class RelayError(Exception):
    """The readability API could not produce metadata for a URL."""


def _escape(text: str) -> str:
    return escape(text, quote=True)


def render_message(url: str, meta: dict) -> str:
    """The HTML-formatted chat message for an extracted article."""
    title = meta.get("title") or "Untitled Article"
    attribution = meta.get("byline") or meta.get("siteName") or hostname_of(url)
    return (
        f'<a href="{_escape(construct_iv_url(url))}"> </a>'
        f'<a href="{_escape(construct_readable_url(url))}">{_escape(title)}</a>\n'
        f'{_escape(attribution)} (<a href="{_escape(url)}">source</a>)'
    )


def result_id(url: str) -> str:
    return hashlib.sha256(json.dumps(url).encode("utf-8")).hexdigest()


async def fetch_meta(url: str) -> dict:
    """Ask the readability API for the JSON extraction of ``url``.

    Raises:
        RelayError: with the API's status line and body, shown to the user.
    """
    async with httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT + 5) as client:
        resp = await client.get(
            settings.READABILITY_API_URL, params={"url": url, "format": "json"}
        )
    if not resp.is_success:
        raise RelayError(
            f"Upstream HTTP Error: {resp.status_code} {resp.reason_phrase}\n{resp.text}"
        )
    return resp.json()


class TelegramBot:
    """Minimal Bot API client (only the methods the relay needs)."""

    def __init__(self, token: str, api_url: str | None = None, timeout: float | None = None):
        self.token = token
        self.api_url = (api_url or settings.TELEGRAM_API_URL).rstrip("/")
        self.timeout = timeout or settings.TELEGRAM_TIMEOUT

    async def call(self, method: str, payload: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(f"{self.api_url}/bot{self.token}/{method}", json=payload)
        data = resp.json() if resp.content else {}
        if not resp.is_success or not data.get("ok", False):
            raise TelegramError(
                f"{method} failed: {resp.status_code} {data.get('description', resp.text)}"
            )
        return data.get("result", {})

    async def send_message(self, chat_id: int, text: str, **options) -> dict:
        return await self.call("sendMessage", {"chat_id": chat_id, "text": text, **options})

    async def edit_message_text(self, chat_id: int, message_id: int, text: str, **options) -> dict:
        return await self.call(
            "editMessageText",
            {"chat_id": chat_id, "message_id": message_id, "text": text, **options},
        )

    async def answer_inline_query(self, inline_query_id: str, results: list[dict], **options) -> dict:
        return await self.call(
            "answerInlineQuery",
            {"inline_query_id": inline_query_id, "results": results, **options},
        )


async def handle_inline_query(bot: TelegramBot, query: InlineQuery) -> None:
    url = fix_url(query.query)
    if not url:
        return
    meta = await fetch_meta(url)
    result = {
        "type": "article",
        "id": result_id(url),
        "title": meta.get("title") or "<UNTITLED>",
        "description": meta.get("excerpt"),
        "input_message_content": {
            "message_text": render_message(url, meta),
            "disable_web_page_preview": False,
            "parse_mode": "HTML",
        },
    }
    try:
        await bot.answer_inline_query(
            query.id, [result], is_personal=False, cache_time=INLINE_CACHE_TIME
        )
    except (TelegramError, httpx.HTTPError) as e:
        # The query has usually expired by now; nothing left to answer
        logger.error(f"InlineQuery error for {url}: {e}")


async def handle_message(bot: TelegramBot, message: Message) -> None:
    text = message.text.strip()
    chat_id = message.chat.id

    if text == "/start":
        await bot.send_message(
            chat_id,
            START_MESSAGE,
            reply_markup={
                "inline_keyboard": [[{"text": "Try Inline Mode", "switch_inline_query": ""}]]
            },
        )
        return

    url = fix_url(text)
    if not url:
        if message.chat.type == "private":
            await bot.send_message(chat_id, "It is not a valid URL.")
        return

    # Acknowledge early, extraction can take a while
    sent = await bot.send_message(chat_id, "Processing...", parse_mode="HTML")
    try:
        meta = await fetch_meta(url)
    except (RelayError, httpx.HTTPError, ValueError) as e:
        logger.warning(f"Relay failed for {url}: {e}")
        await bot.edit_message_text(
            chat_id,
            sent["message_id"],
            f"Failed to fetch the URL with error:\n<pre>{_escape(str(e))}</pre>",
            parse_mode="HTML",
        )
        return
    await bot.edit_message_text(
        chat_id,
        sent["message_id"],
        render_message(url, meta),
        parse_mode="HTML",
        disable_web_page_preview=False,
    )


async def handle_update(bot: TelegramBot, update: Update) -> None:
    """Dispatch one webhook update; updates without usable text are ignored."""
    if update.inline_query and update.inline_query.query.strip():
        kind = "inline_query"
        coro = handle_inline_query(bot, update.inline_query)
    elif update.message and update.message.text and update.message.text.strip():
        kind = "message"
        coro = handle_message(bot, update.message)
    else:
        telegram_updates_total.labels(kind="other", status="ignored").inc()
        return

    try:
        await coro
    except Exception:
        telegram_updates_total.labels(kind=kind, status="error").inc()
        raise
    telegram_updates_total.labels(kind=kind, status="ok").inc()
