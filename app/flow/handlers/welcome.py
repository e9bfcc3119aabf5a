"""
app/flow/handlers/welcome.py

Handles: /start and /help

- Registers the chat identity
- Offers wallet linking when no wallet is linked
- Shows the main menu
"""

from typing import Dict, Any

from app.flow.actions import Start, Help
from app.flow.handlers.common import main_menu_rows
from app.services.container import ServiceContainer
from app.services.identity_service import build_challenge_message
from utils import constants
from utils.telegram_utils import create_keyboard_message, url_button, escape
from app.core.logging import get_logger, LogContext

logger = get_logger(__name__)


async def handle_start(services: ServiceContainer, chat_id: str, action: Start) -> Dict[str, Any]:
    """
    Handles /start.

    Returns:
        Welcome message with the link button (unlinked) or the menu (linked)
    """
    with LogContext(chat_id=chat_id):
        user = await services.users.get_or_create_user(chat_id)

        if user.is_linked:
            logger.info("Returning user")
            return create_keyboard_message(
                constants.WELCOME_LINKED_MESSAGE.format(wallet=user.wallet_address),
                main_menu_rows(),
            )

        logger.info("New or unlinked user, offering wallet link")
        text = constants.WELCOME_MESSAGE + "\n\n" + constants.LINK_WALLET_PROMPT.format(
            message=escape(build_challenge_message(chat_id))
        )
        rows = [[url_button(constants.BUTTON_LINK_WALLET, services.linker.redirect_url(chat_id))]]
        return create_keyboard_message(text, rows + main_menu_rows())


async def handle_help(services: ServiceContainer, chat_id: str, action: Help) -> Dict[str, Any]:
    return create_keyboard_message(constants.HELP_MESSAGE, main_menu_rows())
