"""
app/services/telegram_service.py

Purpose: Telegram Bot API calls

- Sends text / inline-keyboard messages
- Answers callback queries
- Registers the webhook (used by scripts/set_webhook.py)
"""

import httpx
from typing import Dict, Any, Optional

from app.core.config import settings
from app.core.exceptions import DeliveryError
from app.core.logging import get_logger

logger = get_logger(__name__)


class TelegramService:
    """Thin async client for the Telegram Bot API."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.token = token if token is not None else settings.TELEGRAM_BOT_TOKEN
        self.api_base = (api_base or settings.TELEGRAM_API_BASE).rstrip("/")
        self.timeout = timeout or settings.TELEGRAM_TIMEOUT
        self._client = client or httpx.AsyncClient(timeout=self.timeout)

    @property
    def base_url(self) -> str:
        return f"{self.api_base}/bot{self.token}"

    def is_configured(self) -> bool:
        """Check if the bot token is set"""
        return bool(self.token)

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Calls a Bot API method.

        Returns:
            The "result" field of the API response

        Raises:
            DeliveryError: On timeout, transport error or a non-ok response
        """
        if not self.is_configured():
            raise DeliveryError("Telegram bot token is not configured")

        url = f"{self.base_url}/{method}"

        try:
            response = await self._client.post(url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Telegram API timeout calling {method}")
            raise DeliveryError("Telegram API timeout") from e
        except httpx.RequestError as e:
            logger.error(f"Telegram API request error calling {method}: {e}")
            raise DeliveryError(f"Telegram API unreachable: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200 or not body.get("ok"):
            description = body.get("description", response.text[:200])
            logger.error(f"❌ Telegram API error: {response.status_code} - {description}")
            raise DeliveryError(
                f"Telegram API error: {response.status_code}",
                details={"method": method, "description": description},
            )

        return body.get("result") or {}

    async def send_message(self, chat_id: str, message: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sends a message built with utils.telegram_utils.

        Args:
            chat_id: Recipient chat identity
            message: Payload with "text" and optional "parse_mode",
                     "reply_markup", "disable_web_page_preview"

        Returns:
            Sent Message object
        """
        payload = {"chat_id": chat_id, **message}
        logger.info(f"📤 Sending Telegram message to {chat_id}")
        return await self._call("sendMessage", payload)

    async def answer_callback_query(self, callback_query_id: str, text: Optional[str] = None) -> Dict[str, Any]:
        payload = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text
        return await self._call("answerCallbackQuery", payload)

    async def set_webhook(self, url: str, secret_token: Optional[str] = None) -> Dict[str, Any]:
        payload = {"url": url, "allowed_updates": ["message", "callback_query"]}
        if secret_token:
            payload["secret_token"] = secret_token
        return await self._call("setWebhook", payload)

    async def close(self):
        await self._client.aclose()
