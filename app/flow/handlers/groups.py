"""
app/flow/handlers/groups.py

Handles: browsing active groups, group details, joining

Join prepares the registry call and records the membership locally so the
chat's group list can be built without scanning the chain. The membership
is written before the user signs; nothing confirms the on-chain join.
"""

from typing import Dict, Any

from app.flow.actions import BrowseGroups, GroupDetails, JoinGroup
from app.flow.handlers.common import (
    main_menu_rows,
    render_group_line,
    render_group_details,
    render_transaction,
)
from app.services.container import ServiceContainer
from utils import constants
from utils.telegram_utils import create_keyboard_message, create_text_message, callback_button
from app.core.logging import get_logger, LogContext

logger = get_logger(__name__)


async def handle_browse(services: ServiceContainer, chat_id: str, action: BrowseGroups) -> Dict[str, Any]:
    """
    Lists the first page of active groups with join/details buttons.
    """
    groups = await services.aggregator.list_active_groups(0, services.settings.GROUPS_PAGE_SIZE)

    if not groups:
        return create_keyboard_message(constants.NO_GROUPS_MESSAGE, main_menu_rows())

    lines = [constants.BROWSE_HEADER, ""]
    rows = []
    for group in groups:
        lines.append(render_group_line(services, group))
        lines.append("")
        rows.append([
            callback_button(
                constants.BUTTON_JOIN.format(group_id=group.group_id),
                f"{constants.PREFIX_JOIN_GROUP}{group.group_id}",
            ),
            callback_button(
                constants.BUTTON_DETAILS.format(group_id=group.group_id),
                f"{constants.PREFIX_GROUP_DETAILS}{group.group_id}",
            ),
        ])

    logger.info(f"Listed {len(groups)} active groups")
    return create_keyboard_message("\n".join(lines).strip(), rows)


async def handle_group_details(services: ServiceContainer, chat_id: str, action: GroupDetails) -> Dict[str, Any]:
    group = await services.aggregator.get_group_metadata(action.index)

    rows = [] if group.is_full else [[
        callback_button(
            constants.BUTTON_JOIN.format(group_id=group.group_id),
            f"{constants.PREFIX_JOIN_GROUP}{group.group_id}",
        )
    ]]
    return create_keyboard_message(render_group_details(services, group), rows)


async def handle_join(services: ServiceContainer, chat_id: str, action: JoinGroup) -> Dict[str, Any]:
    """
    Prepares a joinGroup transaction.

    Full groups get the reason instead of a payload, and no membership is
    recorded for them.
    """
    group_id = action.index

    with LogContext(chat_id=chat_id, group_id=group_id):
        result = await services.composer.join_group(chat_id, group_id)

        if not result.ok:
            logger.info(f"Join refused: {result.reason}")
            return create_text_message(result.reason)

        await services.users.add_membership(chat_id, group_id, result.wallet_address)

        return render_transaction(services, result.payload)
