"""
app/services/notification_service.py

Purpose: Best-effort outbound chat messages

- At-most-once delivery, never retried
- Failures are logged and reported as a DeliveryOutcome
- Callers' committed state is never rolled back on failure
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional, Union

from app.core.exceptions import DeliveryError
from app.core.logging import get_logger
from app.services.telegram_service import TelegramService
from utils.telegram_utils import create_text_message

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeliveryOutcome:
    delivered: bool
    message_id: Optional[int] = None
    error: Optional[str] = None


class NotificationDispatcher:
    """
    Sends messages to a chat identity and reports what happened.

    The outcome is returned rather than raised so a caller can ignore it
    without silently losing the failure.
    """

    def __init__(self, telegram: TelegramService):
        self.telegram = telegram

    async def notify(self, chat_id: str, message: Union[str, Dict[str, Any]]) -> DeliveryOutcome:
        """
        Delivers a message.

        Args:
            chat_id: Recipient chat identity
            message: Plain text, or a payload from utils.telegram_utils

        Returns:
            DeliveryOutcome
        """
        if isinstance(message, str):
            message = create_text_message(message)

        try:
            result = await self.telegram.send_message(chat_id, message)
        except DeliveryError as e:
            logger.warning(
                f"Notification to {chat_id} not delivered: {e.message}",
                extra={"chat_id": chat_id}
            )
            return DeliveryOutcome(delivered=False, error=e.message)

        return DeliveryOutcome(delivered=True, message_id=result.get("message_id"))

    async def acknowledge(self, callback_query_id: Optional[str]) -> DeliveryOutcome:
        """Stops the loading spinner on an inline button press."""
        if not callback_query_id:
            return DeliveryOutcome(delivered=False, error="no callback query")

        try:
            await self.telegram.answer_callback_query(callback_query_id)
        except DeliveryError as e:
            logger.debug(f"Callback query {callback_query_id} not answered: {e.message}")
            return DeliveryOutcome(delivered=False, error=e.message)

        return DeliveryOutcome(delivered=True)
