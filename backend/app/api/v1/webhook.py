"""Telegram webhook endpoint."""

import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from app.config import settings
from app.schemas.telegram import Update
from app.services.telegram import TelegramBot, handle_update

router = APIRouter()
logger = logging.getLogger(__name__)


def get_bot() -> TelegramBot:
    return TelegramBot(settings.BOT_TOKEN)


@router.post(
    "",
    summary="Telegram webhook",
    description="Receives Telegram Bot API updates. Links sent in private chats or inline "
    "queries are answered with a link to their readable version. Always acknowledges "
    "with 204, or 200 with the error text when handling failed, so Telegram does not "
    "redeliver the update.",
    status_code=204,
)
async def telegram_webhook(update: Update) -> Response:
    if not settings.BOT_TOKEN:
        logger.error("Received a Telegram update but BOT_TOKEN is not configured")
        return PlainTextResponse("Bot is not configured", status_code=200)
    try:
        await handle_update(get_bot(), update)
    except Exception as e:
        logger.exception(f"Telegram update {update.update_id} failed")
        return PlainTextResponse(str(e), status_code=200)
    return Response(status_code=204)
