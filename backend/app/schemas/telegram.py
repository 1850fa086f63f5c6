"""The subset of Telegram's Update object the relay reads.

Unknown fields are ignored so new Bot API versions keep working.
"""

from pydantic import BaseModel


class Chat(BaseModel):
    model_config = {"extra": "ignore"}

    id: int
    type: str = "private"  # private, group, supergroup, channel


class Message(BaseModel):
    model_config = {"extra": "ignore"}

    message_id: int
    chat: Chat
    text: str | None = None


class InlineQuery(BaseModel):
    model_config = {"extra": "ignore"}

    id: str
    query: str = ""


class Update(BaseModel):
    model_config = {"extra": "ignore"}

    update_id: int | None = None
    message: Message | None = None
    inline_query: InlineQuery | None = None
