"""
app/flow/handlers/contribute.py

Handles: contribution menu and contribute()
"""

from typing import Dict, Any

from app.flow.actions import ContributeMenu, Contribute
from app.flow.handlers.common import main_menu_rows, render_transaction
from app.services.container import ServiceContainer
from utils import constants
from utils.telegram_utils import create_keyboard_message, create_text_message, callback_button
from app.core.logging import get_logger, LogContext

logger = get_logger(__name__)


async def handle_contribute_menu(services: ServiceContainer, chat_id: str, action: ContributeMenu) -> Dict[str, Any]:
    """
    One button per joined group.
    """
    await services.composer.require_wallet(chat_id)
    memberships = await services.users.list_memberships(chat_id)

    if not memberships:
        return create_keyboard_message(constants.NO_MEMBERSHIPS_MESSAGE, main_menu_rows())

    rows = [
        [callback_button(
            constants.BUTTON_CONTRIBUTE_TO.format(group_id=m.group_id),
            f"{constants.PREFIX_CONTRIBUTE}{m.group_id}",
        )]
        for m in memberships
    ]
    return create_keyboard_message(constants.CONTRIBUTE_MENU_HEADER, rows)


async def handle_contribute(services: ServiceContainer, chat_id: str, action: Contribute) -> Dict[str, Any]:
    with LogContext(chat_id=chat_id, group_id=action.group_id):
        result = await services.composer.contribute(chat_id, action.group_id)

        if not result.ok:
            logger.info(f"Contribution refused: {result.reason}")
            return create_text_message(result.reason)

        return render_transaction(services, result.payload)
