from fastapi import APIRouter

from app.api.v1 import readability, webhook

api_router = APIRouter(prefix="/v1")

api_router.include_router(readability.router, prefix="/readability", tags=["Readability"])
api_router.include_router(webhook.router, prefix="/webhook", tags=["Telegram"])
