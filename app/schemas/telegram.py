"""
app/schemas/telegram.py

Purpose: Telegram update schemas and parsers

- Validates incoming updates from the Telegram Bot API webhook
- Normalizes messages and callback queries into IncomingMessage
- Ensures predictable request handling
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any
from datetime import datetime


class IncomingMessage(BaseModel):
    """
    Normalized inbound chat event for internal processing.
    Either `text` (typed message / command) or `callback_data`
    (inline keyboard press) is set.
    """
    chat_id: str = Field(..., description="Chat identity, as a string")
    name: str = Field(default="", description="Sender display name")
    text: Optional[str] = Field(default=None, description="Message text content")
    callback_data: Optional[str] = Field(default=None, description="Inline action identifier")
    callback_query_id: Optional[str] = None
    update_id: Optional[int] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_callback(self) -> bool:
        return self.callback_data is not None

    @property
    def is_command(self) -> bool:
        return bool(self.text) and self.text.startswith("/")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "chat_id": "12345",
                "name": "Ada",
                "text": "/start",
            }
        }
    )


def _display_name(sender: Dict[str, Any]) -> str:
    parts = [sender.get("first_name", ""), sender.get("last_name", "")]
    name = " ".join(p for p in parts if p).strip()
    return name or sender.get("username", "")


def parse_telegram_update(payload: Dict[str, Any]) -> Optional[IncomingMessage]:
    """
    Parses a Telegram webhook update.

    Supported shapes:
    - {"update_id": 1, "message": {"chat": {"id": 12345}, "from": {...}, "text": "/start"}}
    - {"update_id": 2, "callback_query": {"id": "q1", "from": {...},
       "message": {"chat": {"id": 12345}}, "data": "browse_groups"}}

    Returns:
        IncomingMessage, or None for update kinds the bot does not handle
    """
    update_id = payload.get("update_id")

    callback = payload.get("callback_query")
    if callback:
        chat = (callback.get("message") or {}).get("chat") or {}
        sender = callback.get("from") or {}
        chat_id = chat.get("id", sender.get("id"))
        if chat_id is None:
            return None
        return IncomingMessage(
            chat_id=str(chat_id),
            name=_display_name(sender),
            callback_data=callback.get("data", ""),
            callback_query_id=callback.get("id"),
            update_id=update_id,
        )

    # Edits (edited_message) are not new input
    message = payload.get("message")
    if message and message.get("text") is not None:
        chat = message.get("chat") or {}
        if chat.get("id") is None:
            return None
        return IncomingMessage(
            chat_id=str(chat["id"]),
            name=_display_name(message.get("from") or {}),
            text=message["text"],
            update_id=update_id,
        )

    return None
