"""Tests for the Telegram chat relay and its webhook."""
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from httpx import AsyncClient

from app.config import construct_iv_url, construct_readable_url, settings
from app.schemas.telegram import Update
from app.services.telegram import (
    START_MESSAGE,
    RelayError,
    TelegramBot,
    TelegramError,
    handle_update,
    render_message,
    result_id,
)

URL = "https://example.com/post"
META = {"title": "Hello & welcome", "byline": None, "siteName": "Example", "excerpt": "Intro"}


def _message_update(text: str, chat_type: str = "private") -> Update:
    return Update.model_validate(
        {
            "update_id": 1,
            "message": {"message_id": 10, "chat": {"id": 42, "type": chat_type}, "text": text},
        }
    )


def _bot() -> AsyncMock:
    bot = AsyncMock(spec=TelegramBot)
    bot.send_message.return_value = {"message_id": 99}
    return bot


class TestRenderMessage:
    def test_links_and_attribution(self):
        text = render_message(URL, META)
        assert text.startswith(f'<a href="{construct_iv_url(URL).replace("&", "&amp;")}"> </a>')
        assert f'<a href="{construct_readable_url(URL)}">Hello &amp; welcome</a>\n' in text
        assert text.endswith(f'Example (<a href="{URL}">source</a>)')

    def test_defaults(self):
        text = render_message(URL, {})
        assert ">Untitled Article</a>" in text
        assert "example.com (<a" in text

    def test_result_id_stable(self):
        assert result_id(URL) == result_id(URL)
        assert result_id(URL) != result_id(URL + "/2")
        assert len(result_id(URL)) == 64


class TestHandleMessage:
    @pytest.mark.asyncio
    async def test_start(self):
        bot = _bot()
        await handle_update(bot, _message_update("/start"))
        bot.send_message.assert_awaited_once()
        args, kwargs = bot.send_message.call_args
        assert args == (42, START_MESSAGE)
        assert kwargs["reply_markup"]["inline_keyboard"][0][0]["switch_inline_query"] == ""

    @pytest.mark.asyncio
    async def test_invalid_url_in_private_chat(self):
        bot = _bot()
        await handle_update(bot, _message_update("hello there"))
        bot.send_message.assert_awaited_once_with(42, "It is not a valid URL.")

    @pytest.mark.asyncio
    async def test_invalid_url_in_group_ignored(self):
        bot = _bot()
        await handle_update(bot, _message_update("hello there", chat_type="group"))
        bot.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_link_is_relayed(self):
        bot = _bot()
        with patch("app.services.telegram.fetch_meta", new=AsyncMock(return_value=META)) as fetch:
            await handle_update(bot, _message_update("example.com/post"))
        fetch.assert_awaited_once_with("http://example.com/post")
        bot.send_message.assert_awaited_once_with(42, "Processing...", parse_mode="HTML")
        args, kwargs = bot.edit_message_text.call_args
        assert args[:2] == (42, 99)
        assert "Hello &amp; welcome" in args[2]
        assert kwargs == {"parse_mode": "HTML", "disable_web_page_preview": False}

    @pytest.mark.asyncio
    async def test_relay_failure_reported(self):
        bot = _bot()
        err = RelayError("Upstream HTTP Error: 502 Bad Gateway\n<boom>")
        with patch("app.services.telegram.fetch_meta", new=AsyncMock(side_effect=err)):
            await handle_update(bot, _message_update(URL))
        text = bot.edit_message_text.call_args.args[2]
        assert text == (
            "Failed to fetch the URL with error:\n"
            "<pre>Upstream HTTP Error: 502 Bad Gateway\n&lt;boom&gt;</pre>"
        )


class TestHandleInlineQuery:
    @pytest.mark.asyncio
    async def test_answers_with_article(self):
        bot = _bot()
        update = Update.model_validate({"update_id": 2, "inline_query": {"id": "q1", "query": URL}})
        with patch("app.services.telegram.fetch_meta", new=AsyncMock(return_value=META)):
            await handle_update(bot, update)
        args, kwargs = bot.answer_inline_query.call_args
        assert args[0] == "q1"
        result = args[1][0]
        assert result["id"] == result_id(URL)
        assert result["title"] == "Hello & welcome"
        assert result["description"] == "Intro"
        assert result["input_message_content"]["parse_mode"] == "HTML"
        assert kwargs == {"is_personal": False, "cache_time": 900}

    @pytest.mark.asyncio
    async def test_expired_query_logged(self):
        bot = _bot()
        bot.answer_inline_query.side_effect = TelegramError("query is too old")
        update = Update.model_validate({"update_id": 2, "inline_query": {"id": "q1", "query": URL}})
        with patch("app.services.telegram.fetch_meta", new=AsyncMock(return_value=META)):
            await handle_update(bot, update)

    @pytest.mark.asyncio
    async def test_empty_update_ignored(self):
        bot = _bot()
        await handle_update(bot, Update(update_id=3))
        bot.send_message.assert_not_called()
        bot.answer_inline_query.assert_not_called()


class TestTelegramBot:
    @pytest.mark.asyncio
    async def test_call_posts_to_method_url(self):
        real_client = httpx.AsyncClient
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 5}})

        def factory(**kwargs):
            return real_client(transport=httpx.MockTransport(handler), **kwargs)

        with patch("app.services.telegram.httpx.AsyncClient", factory):
            result = await TelegramBot("123:abc", api_url="https://tg.example").send_message(1, "hi")
        assert seen["url"] == "https://tg.example/bot123:abc/sendMessage"
        assert result == {"message_id": 5}

    @pytest.mark.asyncio
    async def test_not_ok_raises(self):
        real_client = httpx.AsyncClient

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"ok": False, "description": "Bad Request"})

        def factory(**kwargs):
            return real_client(transport=httpx.MockTransport(handler), **kwargs)

        with patch("app.services.telegram.httpx.AsyncClient", factory):
            with pytest.raises(TelegramError):
                await TelegramBot("t", api_url="https://tg.example").send_message(1, "hi")


class TestWebhook:
    @pytest.mark.asyncio
    async def test_not_configured(self, client: AsyncClient):
        with patch.object(settings, "BOT_TOKEN", ""):
            resp = await client.post("/v1/webhook", json={"update_id": 1})
        assert resp.status_code == 200
        assert resp.text == "Bot is not configured"

    @pytest.mark.asyncio
    async def test_update_handled(self, client: AsyncClient):
        with patch.object(settings, "BOT_TOKEN", "t"), patch(
            "app.api.v1.webhook.handle_update", new=AsyncMock()
        ) as handle:
            resp = await client.post("/v1/webhook", json={"update_id": 1, "message": None})
        assert resp.status_code == 204
        handle.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_acknowledged_with_error_text(self, client: AsyncClient):
        with patch.object(settings, "BOT_TOKEN", "t"), patch(
            "app.api.v1.webhook.handle_update", new=AsyncMock(side_effect=TelegramError("boom"))
        ):
            resp = await client.post("/v1/webhook", json={"update_id": 1})
        assert resp.status_code == 200
        assert resp.text == "boom"
